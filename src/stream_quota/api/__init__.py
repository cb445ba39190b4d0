"""HTTP API for stream-quota."""

from stream_quota.api.main import app

__all__ = ["app"]
