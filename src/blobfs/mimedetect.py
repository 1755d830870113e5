from blobfs.interfaces import IMimeTypeDetector
from zope.interface import implementer

import mimetypes


SAMPLE_SIZE = 1024

_MAGIC_NUMBERS = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
)


@implementer(IMimeTypeDetector)
class ExtensionMimeTypeDetector:
    """Detect MIME types from the file extension, then from content.

    Content detection only looks at a short sample: bytes are sliced,
    seekable streams are read and rewound, other streams are left alone.
    """

    def __init__(self, default="application/octet-stream"):
        self.default = default

    def detect_mimetype(self, path, contents):
        mimetype, _encoding = mimetypes.guess_type(path, strict=False)
        if mimetype:
            return mimetype
        sample = _sample(contents)
        if sample is None:
            return self.default
        return self.detect_mimetype_from_buffer(sample)

    def detect_mimetype_from_buffer(self, sample):
        for magic, mimetype in _MAGIC_NUMBERS:
            if sample.startswith(magic):
                return mimetype
        if not sample:
            return self.default
        try:
            sample.decode("utf-8")
        except UnicodeDecodeError as e:
            # a multi-byte sequence may be cut off by the sample size
            if e.reason != "unexpected end of data":
                return self.default
        return "text/plain"


def _sample(contents):
    if isinstance(contents, (bytes, bytearray, memoryview)):
        return bytes(contents[:SAMPLE_SIZE])
    seekable = getattr(contents, "seekable", None)
    if seekable is None or not seekable():
        return None
    position = contents.tell()
    try:
        return contents.read(SAMPLE_SIZE)
    finally:
        contents.seek(position)
