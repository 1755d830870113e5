from blobfs.attributes import FileAttributes
from blobfs.attributes import file_attributes
from blobfs.errors import UnableToCheckExistence
from blobfs.errors import UnableToCopyFile
from blobfs.errors import UnableToDeleteDirectory
from blobfs.errors import UnableToDeleteFile
from blobfs.errors import UnableToMoveFile
from blobfs.errors import UnableToReadFile
from blobfs.errors import UnableToRetrieveMetadata
from blobfs.errors import UnableToSetVisibility
from blobfs.errors import UnableToWriteFile
from blobfs.errors import translated
from blobfs.interfaces import IFilesystemAdapter
from blobfs.interfaces import ITemporaryUrlGenerator
from blobfs.listing import DELIMITER
from blobfs.listing import list_contents
from blobfs.mimedetect import ExtensionMimeTypeDetector
from blobfs.paths import get_prefix
from blobfs.signing import signature_values
from zope.interface import implementer

import logging


logger = logging.getLogger(__name__)

UNSUPPORTED = "Blob storage does not support this operation."


@implementer(IFilesystemAdapter, ITemporaryUrlGenerator)
class BlobStorageAdapter:
    """Filesystem view over a single blob container.

    Directories are never stored: a directory exists while at least one
    blob lives under its prefix. Every store fault is re-raised as the
    operation's own error from ``blobfs.errors``.
    """

    def __init__(self, container, mime_type_detector=None):
        self._container = container
        self._mime_type_detector = (
            mime_type_detector or ExtensionMimeTypeDetector()
        )

    def __repr__(self):
        return f"<BlobStorageAdapter for container {self._container.name!r}>"

    # -- Existence --

    def file_exists(self, path):
        with translated(UnableToCheckExistence, path):
            return self._container.exists(path)

    def directory_exists(self, path):
        with translated(UnableToCheckExistence, path):
            page = self._container.list_page(
                prefix=get_prefix(path), delimiter=DELIMITER, max_results=1
            )
            return bool(page.prefixes or page.blobs)

    # -- Writing --

    def write(self, path, contents):
        self._upload(path, contents)

    def write_stream(self, path, contents):
        self._upload(path, contents)

    def _upload(self, path, contents):
        with translated(UnableToWriteFile, path):
            mimetype = self._mime_type_detector.detect_mimetype(path, contents)
            self._container.upload(path, contents, content_type=mimetype)

    # -- Reading --

    def read(self, path):
        with translated(UnableToReadFile, path):
            stream = self._download(path)
            try:
                return stream.read()
            finally:
                _close(stream)

    def read_stream(self, path):
        with translated(UnableToReadFile, path):
            return self._download(path)

    def _download(self, path):
        stream = self._container.download(path)
        if stream is None:
            raise RuntimeError(f"Store returned no stream for {path!r}")
        return stream

    # -- Deleting --

    def delete(self, path):
        with translated(UnableToDeleteFile, path):
            self._container.delete_if_exists(path)

    def delete_directory(self, path):
        deleted = 0
        with translated(UnableToDeleteDirectory, path):
            for item in self.list_contents(path, deep=True):
                if isinstance(item, FileAttributes):
                    self._container.delete(item.path)
                    deleted += 1
        logger.info("Deleted %d blobs under %r", deleted, path)

    # -- Unsupported --

    def create_directory(self, path):
        """Directories are implied by blob names, nothing to create."""

    def set_visibility(self, path, visibility):
        raise UnableToSetVisibility(path, UNSUPPORTED)

    def visibility(self, path):
        raise UnableToRetrieveMetadata(
            path, UnableToRetrieveMetadata.VISIBILITY, UNSUPPORTED
        )

    # -- Metadata --

    def mime_type(self, path):
        with translated(
            UnableToRetrieveMetadata, path, UnableToRetrieveMetadata.MIME_TYPE
        ):
            return self._fetch_metadata(path)

    def last_modified(self, path):
        with translated(
            UnableToRetrieveMetadata, path, UnableToRetrieveMetadata.LAST_MODIFIED
        ):
            return self._fetch_metadata(path)

    def file_size(self, path):
        with translated(
            UnableToRetrieveMetadata, path, UnableToRetrieveMetadata.FILE_SIZE
        ):
            return self._fetch_metadata(path)

    def _fetch_metadata(self, path):
        return file_attributes(path, self._container.get_properties(path))

    # -- Listing --

    def list_contents(self, path, deep=False):
        return list_contents(self._container, path, deep)

    # -- Copy / move --

    def copy(self, source, destination):
        with translated(UnableToCopyFile, source, destination):
            self._container.copy(source, destination)

    def move(self, source, destination):
        # Not atomic: a failed delete leaves the copy in place.
        with translated(UnableToMoveFile, source, destination):
            self.copy(source, destination)
            try:
                self.delete(source)
            except UnableToDeleteFile:
                logger.warning(
                    "Copied %r to %r but could not delete the source",
                    source,
                    destination,
                )
                raise

    # -- Signed URLs --

    def temporary_url(self, path, expires_at, config=None):
        values = signature_values(self._container.name, path, expires_at, config)
        return self._container.signed_url(values)


def _close(stream):
    close = getattr(stream, "close", None)
    if close is not None:
        close()
