"""Base exception for recoverable per-edition failures."""


class PublisherError(Exception):
    """Raised by a pipeline step when one edition cannot be published.

    The pipeline catches these at the edition boundary, records the failure
    and moves on to the next edition.
    """
