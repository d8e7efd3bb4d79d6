"""GeoLite2 database republisher for npm and Cloudflare R2."""

__version__ = "0.1.0"
