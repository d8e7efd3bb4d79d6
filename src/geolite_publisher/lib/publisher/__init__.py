"""Publisher library: public API for republishing GeoLite2 databases.

Provides npm bundle creation and publishing, Cloudflare R2 object uploads,
and the result types recorded for every edition of a run.
"""

from geolite_publisher.lib.publisher.npm import (
    PublishError,
    build_bundle,
    build_package_json,
    compute_run_version,
    npmrc_auth_line,
    publish_bundle,
)
from geolite_publisher.lib.publisher.storage import object_keys, object_url, put_object, upload_artifact
from geolite_publisher.lib.publisher.types import EditionResult, PipelineStep, RunSummary, UploadResult

__all__ = [
    "EditionResult",
    "PipelineStep",
    "PublishError",
    "RunSummary",
    "UploadResult",
    "build_bundle",
    "build_package_json",
    "compute_run_version",
    "npmrc_auth_line",
    "object_keys",
    "object_url",
    "publish_bundle",
    "put_object",
    "upload_artifact",
]
