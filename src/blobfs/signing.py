
import dataclasses
import datetime


READ_PERMISSION = "r"
HTTPS_AND_HTTP = "https,http"
HTTPS_ONLY = "https"

#: Options read from a temporary URL config; anything else is ignored.
OPTIONS = (
    "permissions",
    "identifier",
    "starts_on",
    "cache_control",
    "content_disposition",
    "content_encoding",
    "content_language",
    "content_type",
    "encryption_scope",
    "ip_range",
    "snapshot_time",
    "protocol",
    "version",
)


@dataclasses.dataclass(frozen=True)
class SignatureValues:
    """Everything that goes into a signed, time-bounded blob URL."""

    container_name: str
    blob_name: str
    expires_on: datetime.datetime
    permissions: str = READ_PERMISSION
    identifier: str = None
    starts_on: datetime.datetime = None
    cache_control: str = None
    content_disposition: str = None
    content_encoding: str = None
    content_language: str = None
    content_type: str = None
    encryption_scope: str = None
    ip_range: str = None
    snapshot_time: str = None
    protocol: str = HTTPS_AND_HTTP
    version: str = None


def signature_values(container_name, path, expires_at, config=None):
    """Build SignatureValues for path from a temporary URL config mapping.

    Missing options fall back to read-only permission over both https and
    http. Malformed required parameters raise immediately.
    """
    if not isinstance(expires_at, datetime.datetime):
        raise TypeError(
            f"expires_at must be a datetime, got {type(expires_at).__name__}"
        )
    if not path:
        raise ValueError("a blob path is required to sign a URL")
    config = config or {}
    options = {key: config[key] for key in OPTIONS if config.get(key) is not None}
    options.setdefault("permissions", READ_PERMISSION)
    options.setdefault("protocol", HTTPS_AND_HTTP)
    if options["protocol"] not in (HTTPS_ONLY, HTTPS_AND_HTTP):
        raise ValueError(
            f"protocol must be {HTTPS_ONLY!r} or {HTTPS_AND_HTTP!r}, "
            f"got {options['protocol']!r}"
        )
    starts_on = options.get("starts_on")
    if isinstance(starts_on, datetime.datetime) and starts_on >= expires_at:
        raise ValueError("starts_on must be earlier than expires_at")
    return SignatureValues(
        container_name=container_name,
        blob_name=path,
        expires_on=expires_at,
        **options,
    )
