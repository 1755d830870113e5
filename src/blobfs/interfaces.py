from zope.interface import Attribute
from zope.interface import Interface


class IBlobContainer(Interface):
    """A single container (bucket) of a flat, prefix-addressed blob store."""

    name = Attribute("Name of the container or bucket.")

    def exists(name):
        """Return True if a blob with this exact name exists."""

    def get_properties(name):
        """Return BlobProperties for a blob; raise if it does not exist."""

    def download(name):
        """Return a readable binary file object over the blob body."""

    def upload(name, data, content_type=None):
        """Upload bytes or a binary file object, replacing any existing blob."""

    def delete(name):
        """Delete a blob; raise if it does not exist."""

    def delete_if_exists(name):
        """Delete a blob if present."""

    def copy(source, destination):
        """Server-side copy of a blob within this container."""

    def list_page(prefix=None, delimiter=None, marker="", max_results=None):
        """Fetch one page of a listing as a ListingPage.

        With a delimiter, deeper names are grouped into blob prefixes.
        The page's next_marker is "" when there are no more pages.
        """

    def signed_url(values):
        """Return a signed, time-bounded URL for SignatureValues."""


class IMimeTypeDetector(Interface):
    """Content-type detection from a path and a content sample."""

    def detect_mimetype(path, contents):
        """Return a MIME type string, or None if nothing matches."""


class IFilesystemAdapter(Interface):
    """Hierarchical filesystem view over a blob container."""

    def file_exists(path):
        """Return True if a file exists at path."""

    def directory_exists(path):
        """Return True if anything is stored under path."""

    def write(path, contents):
        """Write bytes or a binary stream to path."""

    def write_stream(path, contents):
        """Write a binary stream to path."""

    def read(path):
        """Return the file contents as bytes."""

    def read_stream(path):
        """Return a readable binary stream over the file contents."""

    def delete(path):
        """Delete the file at path, if any."""

    def delete_directory(path):
        """Delete every file under path."""

    def create_directory(path):
        """Create a directory (no-op for blob stores)."""

    def set_visibility(path, visibility):
        """Change visibility (unsupported)."""

    def visibility(path):
        """Return visibility (unsupported)."""

    def mime_type(path):
        """Return FileAttributes with the mime type populated."""

    def last_modified(path):
        """Return FileAttributes with the modification time populated."""

    def file_size(path):
        """Return FileAttributes with the size populated."""

    def list_contents(path, deep=False):
        """Lazily yield FileAttributes and DirectoryAttributes under path."""

    def copy(source, destination):
        """Copy a file."""

    def move(source, destination):
        """Move a file (copy, then delete the source)."""


class ITemporaryUrlGenerator(Interface):
    """Generation of signed, time-bounded access URLs."""

    def temporary_url(path, expires_at, config=None):
        """Return a signed URL to path valid until expires_at."""
