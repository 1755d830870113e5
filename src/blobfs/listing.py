from blobfs.attributes import DirectoryAttributes
from blobfs.attributes import file_attributes
from blobfs.errors import UnableToListContents
from blobfs.errors import translated
from blobfs.paths import get_prefix

import logging


logger = logging.getLogger(__name__)

DELIMITER = "/"


def list_contents(container, path, deep=False):
    """Yield DirectoryAttributes and FileAttributes found under path.

    Pages are fetched one at a time as the generator is consumed, so a
    caller that stops early never triggers further requests. A shallow
    listing groups deeper names into blob prefixes (directories); a deep
    listing returns every blob individually.
    """
    prefix = get_prefix(path)
    delimiter = None if deep else DELIMITER
    marker = ""
    with translated(UnableToListContents, path, deep):
        while True:
            page = container.list_page(
                prefix=prefix, delimiter=delimiter, marker=marker
            )
            for name in page.prefixes:
                yield DirectoryAttributes(name)
            for blob in page.blobs:
                yield file_attributes(blob.name, blob)
            marker = page.next_marker
            if not marker:
                break
            logger.debug("Listing %r continues at marker %r", path, marker)
