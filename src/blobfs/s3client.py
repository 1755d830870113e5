from blobfs.attributes import BlobProperties
from blobfs.attributes import ListingPage
from blobfs.errors import StoreOperationError
from blobfs.interfaces import IBlobContainer
from blobfs.signing import HTTPS_ONLY
from botocore.config import Config
from botocore.exceptions import ClientError
from zope.interface import implementer

import base64
import boto3
import datetime
import logging
import re


logger = logging.getLogger(__name__)

# Signing options a presigned S3 URL has no way to express.
_UNSIGNABLE = ("identifier", "starts_on", "ip_range", "encryption_scope")

_HEADER_OVERRIDES = (
    ("cache_control", "CacheControl"),
    ("content_disposition", "ContentDisposition"),
    ("content_encoding", "ContentEncoding"),
    ("content_language", "ContentLanguage"),
    ("content_type", "ContentType"),
)


@implementer(IBlobContainer)
class S3BlobContainer:
    """Thin boto3 wrapper presenting an S3 bucket as a blob container."""

    def __init__(
        self,
        bucket_name,
        prefix="",
        endpoint_url=None,
        region_name=None,
        aws_access_key_id=None,
        aws_secret_access_key=None,
        use_ssl=True,
        addressing_style="auto",
        connect_timeout=60,
        read_timeout=60,
        sse_customer_key=None,
    ):
        self.name = bucket_name
        self._prefix = prefix.rstrip("/") if prefix else ""

        if self._prefix:
            if not re.fullmatch(r"[a-zA-Z0-9._/-]*", self._prefix):
                raise ValueError(
                    f"prefix contains invalid characters: {self._prefix!r}. "
                    "Only alphanumeric characters, dots, hyphens, underscores, "
                    "and slashes are allowed."
                )
            if ".." in self._prefix:
                raise ValueError(f"prefix must not contain '..': {self._prefix!r}")

        # SSE-C setup
        if sse_customer_key:
            if not use_ssl:
                raise ValueError("SSE-C requires SSL, set use-ssl to true")
            raw_key = base64.b64decode(sse_customer_key)
            if len(raw_key) != 32:
                raise ValueError(
                    f"SSE-C key must be 32 bytes (256-bit), got {len(raw_key)}"
                )
            self._sse_extra_args = {
                "SSECustomerAlgorithm": "AES256",
                "SSECustomerKey": raw_key,
            }
        else:
            self._sse_extra_args = {}

        config = Config(
            s3={"addressing_style": addressing_style},
            signature_version="s3v4",
            connect_timeout=connect_timeout,
            read_timeout=read_timeout,
        )

        kwargs = {"config": config}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        if region_name:
            kwargs["region_name"] = region_name
        if aws_access_key_id:
            kwargs["aws_access_key_id"] = aws_access_key_id
        if aws_secret_access_key:
            kwargs["aws_secret_access_key"] = aws_secret_access_key
        kwargs["use_ssl"] = use_ssl
        if not use_ssl:
            logger.warning(
                "S3 SSL is disabled, data and credentials are transmitted in cleartext"
            )

        self._client = boto3.client("s3", **kwargs)

    def __repr__(self):
        return f"<S3BlobContainer {self.name!r} prefix={self._prefix!r}>"

    def _full_key(self, name):
        if self._prefix:
            return f"{self._prefix}/{name}"
        return name

    def _logical_key(self, key):
        if self._prefix:
            return key[len(self._prefix) + 1 :]
        return key

    def _wrap_client_error(self, e, operation, name):
        """Wrap ClientError in a generic error, logging the original at DEBUG."""
        logger.debug("S3 %s failed for key=%s: %s", operation, name, e)
        raise StoreOperationError(
            f"S3 {operation} failed for key={name}: "
            f"{e.response['Error'].get('Code', 'Unknown')}"
        ) from e

    def _head(self, name):
        return self._client.head_object(
            Bucket=self.name, Key=self._full_key(name), **self._sse_extra_args
        )

    def exists(self, name):
        try:
            self._head(name)
        except ClientError as e:
            if e.response["Error"]["Code"] in ("404", "NoSuchKey"):
                return False
            self._wrap_client_error(e, "head", name)
        return True

    def get_properties(self, name):
        try:
            response = self._head(name)
        except ClientError as e:
            self._wrap_client_error(e, "head", name)
        return BlobProperties(
            name,
            size=response["ContentLength"],
            last_modified=response["LastModified"],
            content_type=response.get("ContentType"),
        )

    def download(self, name):
        try:
            response = self._client.get_object(
                Bucket=self.name, Key=self._full_key(name), **self._sse_extra_args
            )
        except ClientError as e:
            self._wrap_client_error(e, "download", name)
        return response["Body"]

    def upload(self, name, data, content_type=None):
        extra_args = dict(self._sse_extra_args)
        if content_type:
            extra_args["ContentType"] = content_type
        try:
            if isinstance(data, (bytes, bytearray, memoryview)):
                self._client.put_object(
                    Bucket=self.name,
                    Key=self._full_key(name),
                    Body=bytes(data),
                    **extra_args,
                )
            else:
                self._client.upload_fileobj(
                    data,
                    self.name,
                    self._full_key(name),
                    ExtraArgs=extra_args or None,
                )
        except ClientError as e:
            self._wrap_client_error(e, "upload", name)

    def delete(self, name):
        # S3 deletes are idempotent, a missing key is not an error
        try:
            self._client.delete_object(Bucket=self.name, Key=self._full_key(name))
        except ClientError as e:
            self._wrap_client_error(e, "delete", name)

    delete_if_exists = delete

    def copy(self, source, destination):
        extra_args = dict(self._sse_extra_args)
        if self._sse_extra_args:
            extra_args["CopySourceSSECustomerAlgorithm"] = "AES256"
            extra_args["CopySourceSSECustomerKey"] = self._sse_extra_args[
                "SSECustomerKey"
            ]
        try:
            self._client.copy_object(
                Bucket=self.name,
                Key=self._full_key(destination),
                CopySource={"Bucket": self.name, "Key": self._full_key(source)},
                **extra_args,
            )
        except ClientError as e:
            self._wrap_client_error(e, "copy", source)

    def list_page(self, prefix=None, delimiter=None, marker="", max_results=None):
        if prefix:
            full_prefix = self._full_key(prefix)
        elif self._prefix:
            full_prefix = f"{self._prefix}/"
        else:
            full_prefix = ""
        kwargs = {"Bucket": self.name, "Prefix": full_prefix}
        if delimiter:
            kwargs["Delimiter"] = delimiter
        if marker:
            kwargs["ContinuationToken"] = marker
        if max_results:
            kwargs["MaxKeys"] = max_results
        try:
            response = self._client.list_objects_v2(**kwargs)
        except ClientError as e:
            self._wrap_client_error(e, "list", prefix or "")
        prefixes = tuple(
            self._logical_key(p["Prefix"]) for p in response.get("CommonPrefixes", [])
        )
        # Listings carry no content type, only a HEAD does.
        blobs = tuple(
            BlobProperties(
                self._logical_key(obj["Key"]),
                size=obj["Size"],
                last_modified=obj["LastModified"],
            )
            for obj in response.get("Contents", [])
        )
        return ListingPage(prefixes, blobs, response.get("NextContinuationToken", ""))

    def signed_url(self, values):
        for option in _UNSIGNABLE:
            if getattr(values, option) is not None:
                raise ValueError(f"S3 presigned URLs do not support {option}")
        if values.version is not None:
            logger.debug("Ignoring signed version %r for S3", values.version)

        params = {"Bucket": self.name, "Key": self._full_key(values.blob_name)}
        permissions = set(values.permissions)
        if permissions == {"r"}:
            method = "get_object"
            if values.snapshot_time is not None:
                params["VersionId"] = values.snapshot_time
            for option, param in _HEADER_OVERRIDES:
                if getattr(values, option) is not None:
                    params[f"Response{param}"] = getattr(values, option)
        elif permissions and permissions <= {"c", "w"}:
            method = "put_object"
            for option, param in _HEADER_OVERRIDES:
                if getattr(values, option) is not None:
                    params[param] = getattr(values, option)
        elif permissions == {"d"}:
            method = "delete_object"
        else:
            raise ValueError(
                "S3 presigned URLs grant one operation, "
                f"cannot sign permissions {values.permissions!r}"
            )
        if values.snapshot_time is not None and method != "get_object":
            raise ValueError("snapshot_time can only be signed for reads")

        now = datetime.datetime.now(datetime.timezone.utc)
        expires_in = int((values.expires_on - now).total_seconds())
        if expires_in <= 0:
            raise ValueError("expires_at must be in the future")

        url = self._client.generate_presigned_url(
            method, Params=params, ExpiresIn=expires_in
        )
        if values.protocol == HTTPS_ONLY and not url.startswith("https://"):
            raise ValueError("https-only URL requested from a non-SSL endpoint")
        return url
