from azure.core.exceptions import AzureError
from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import BlobPrefix
from azure.storage.blob import ContainerClient
from azure.storage.blob import ContentSettings
from azure.storage.blob import generate_blob_sas
from blobfs.attributes import BlobProperties
from blobfs.attributes import ListingPage
from blobfs.errors import StoreOperationError
from blobfs.interfaces import IBlobContainer
from zope.interface import implementer

import io
import logging
import time


logger = logging.getLogger(__name__)


@implementer(IBlobContainer)
class AzureBlobContainer:
    """Thin azure-storage-blob wrapper around a single container.

    Signed URLs need the account key, so the container client must be
    authenticated with a shared key (account key or connection string).
    """

    copy_poll_interval = 0.5

    def __init__(self, container_client):
        self._client = container_client
        self.name = container_client.container_name

    @classmethod
    def from_connection_string(cls, connection_string, container_name):
        return cls(
            ContainerClient.from_connection_string(connection_string, container_name)
        )

    @classmethod
    def from_account(cls, account_url, container_name, account_name, account_key):
        credential = {"account_name": account_name, "account_key": account_key}
        return cls(ContainerClient(account_url, container_name, credential=credential))

    def __repr__(self):
        return f"<AzureBlobContainer {self._client.url!r}>"

    def _wrap_error(self, e, operation, name):
        """Wrap AzureError in a generic error, logging the original at DEBUG."""
        logger.debug("Azure %s failed for blob=%s: %s", operation, name, e)
        code = getattr(e, "error_code", None) or type(e).__name__
        raise StoreOperationError(
            f"Azure {operation} failed for blob={name}: {code}"
        ) from e

    def _blob(self, name):
        return self._client.get_blob_client(name)

    def exists(self, name):
        try:
            return self._blob(name).exists()
        except AzureError as e:
            self._wrap_error(e, "exists", name)

    def get_properties(self, name):
        try:
            properties = self._blob(name).get_blob_properties()
        except AzureError as e:
            self._wrap_error(e, "get properties", name)
        return _blob_properties(properties)

    def download(self, name):
        try:
            downloader = self._blob(name).download_blob()
        except AzureError as e:
            self._wrap_error(e, "download", name)
        return io.BufferedReader(DownloadStream(downloader))

    def upload(self, name, data, content_type=None):
        try:
            self._blob(name).upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type),
            )
        except AzureError as e:
            self._wrap_error(e, "upload", name)

    def delete(self, name):
        try:
            self._blob(name).delete_blob()
        except AzureError as e:
            self._wrap_error(e, "delete", name)

    def delete_if_exists(self, name):
        try:
            self._blob(name).delete_blob()
        except ResourceNotFoundError:
            logger.debug("Blob %s already gone", name)
        except AzureError as e:
            self._wrap_error(e, "delete", name)

    def copy(self, source, destination):
        target = self._blob(destination)
        try:
            result = target.start_copy_from_url(self._blob(source).url)
            status = result.get("copy_status")
            description = None
            while status == "pending":
                time.sleep(self.copy_poll_interval)
                copy = target.get_blob_properties().copy
                status, description = copy.status, copy.status_description
        except AzureError as e:
            self._wrap_error(e, "copy", source)
        if status not in ("success", None):
            raise StoreOperationError(
                f"Azure copy {status} for blob={source}: {description}"
            )

    def list_page(self, prefix=None, delimiter=None, marker="", max_results=None):
        if delimiter:
            paged = self._client.walk_blobs(
                name_starts_with=prefix,
                delimiter=delimiter,
                results_per_page=max_results,
            )
        else:
            paged = self._client.list_blobs(
                name_starts_with=prefix, results_per_page=max_results
            )
        try:
            pages = paged.by_page(continuation_token=marker or None)
            items = list(next(pages))
        except AzureError as e:
            self._wrap_error(e, "list", prefix or "")
        prefixes = []
        blobs = []
        for item in items:
            if isinstance(item, BlobPrefix):
                prefixes.append(item.name)
            else:
                blobs.append(_blob_properties(item))
        return ListingPage(
            tuple(prefixes), tuple(blobs), pages.continuation_token or ""
        )

    def signed_url(self, values):
        credential = self._client.credential
        account_key = getattr(credential, "account_key", None)
        if not account_key:
            raise ValueError("Signed URLs require a shared key credential")
        if values.version is not None:
            logger.debug(
                "Ignoring signed version %r, the SDK signs with its own", values.version
            )
        sas = generate_blob_sas(
            account_name=self._client.account_name,
            container_name=values.container_name,
            blob_name=values.blob_name,
            snapshot=values.snapshot_time,
            account_key=account_key,
            permission=values.permissions,
            expiry=values.expires_on,
            start=values.starts_on,
            policy_id=values.identifier,
            ip=values.ip_range,
            protocol=values.protocol,
            cache_control=values.cache_control,
            content_disposition=values.content_disposition,
            content_encoding=values.content_encoding,
            content_language=values.content_language,
            content_type=values.content_type,
            encryption_scope=values.encryption_scope,
        )
        url = self._client.get_blob_client(
            values.blob_name, snapshot=values.snapshot_time
        ).url
        separator = "&" if "?" in url else "?"
        return f"{url}{separator}{sas}"


def _blob_properties(properties):
    return BlobProperties(
        properties.name,
        size=properties.size,
        last_modified=properties.last_modified,
        content_type=properties.content_settings.content_type,
    )


class DownloadStream(io.RawIOBase):
    """Raw binary file object over a blob downloader's chunks."""

    def __init__(self, downloader):
        self._chunks = downloader.chunks()
        self._pending = b""

    def readable(self):
        return True

    def readinto(self, buffer):
        while not self._pending:
            try:
                self._pending = next(self._chunks)
            except StopIteration:
                return 0
        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size
