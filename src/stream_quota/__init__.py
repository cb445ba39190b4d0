"""Per-user concurrent stream admission control."""

__version__ = "0.1.0"

from stream_quota.core.exceptions import StreamQuotaError  # noqa: E402
from stream_quota.core.types import IdentityRecord  # noqa: E402
from stream_quota.registry import Registry, get_registry, init_registry  # noqa: E402

__all__ = [
    "IdentityRecord",
    "Registry",
    "StreamQuotaError",
    "__version__",
    "get_registry",
    "init_registry",
]
