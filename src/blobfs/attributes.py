import dataclasses
import datetime


@dataclasses.dataclass(frozen=True)
class BlobProperties:
    """Raw properties of a blob as reported by the store."""

    name: str
    size: int
    last_modified: datetime.datetime
    content_type: str = None


@dataclasses.dataclass(frozen=True)
class ListingPage:
    """One page of a prefix listing.

    ``prefixes`` holds the names of blob prefixes (virtual directories)
    and ``blobs`` the BlobProperties of the files. An empty
    ``next_marker`` means this was the last page.
    """

    prefixes: tuple = ()
    blobs: tuple = ()
    next_marker: str = ""


@dataclasses.dataclass(frozen=True)
class FileAttributes:
    path: str
    file_size: int = None
    last_modified: int = None
    mime_type: str = None

    is_file = True
    is_dir = False


@dataclasses.dataclass(frozen=True)
class DirectoryAttributes:
    path: str

    is_file = False
    is_dir = True


def file_attributes(path, properties):
    """Map store-side BlobProperties to FileAttributes for path."""
    return FileAttributes(
        path,
        file_size=properties.size,
        last_modified=_timestamp(properties.last_modified),
        mime_type=properties.content_type or None,
    )


def _timestamp(value):
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return int(value.timestamp())
