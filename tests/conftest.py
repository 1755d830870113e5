from blobfs.adapter import BlobStorageAdapter
from blobfs.attributes import BlobProperties
from blobfs.attributes import ListingPage
from blobfs.interfaces import IBlobContainer
from zope.interface import implementer

import datetime
import io
import pytest


MTIME = datetime.datetime(2024, 5, 1, 12, 0, tzinfo=datetime.timezone.utc)

# Well-known development storage key, not a secret.
ACCOUNT_KEY = (
    "Eby8vdM02xNOcqFlqUwJPLlmEtlCDXJ1OUzFT50uSRZ6IFsuFq2UVErCz4I6tq/"
    "K1SZFPTOtr/KBHBeksoGMGw=="
)


class StoreFault(Exception):
    """Stands in for any error raised by a store SDK."""


@implementer(IBlobContainer)
class InMemoryContainer:
    """Dict-backed IBlobContainer with call recording and fault injection."""

    def __init__(self, name="test-container", page_size=1000):
        self.name = name
        self.page_size = page_size
        self.blobs = {}  # {name: (data, content_type)}
        self.calls = []
        self.failures = {}  # {(method, name): exception}

    def _record(self, method, name=None):
        self.calls.append((method, name))
        failure = self.failures.get((method, name))
        if failure is not None:
            raise failure

    def calls_to(self, method):
        return [name for m, name in self.calls if m == method]

    def exists(self, name):
        self._record("exists", name)
        return name in self.blobs

    def get_properties(self, name):
        self._record("get_properties", name)
        if name not in self.blobs:
            raise StoreFault(f"no such blob {name}")
        data, content_type = self.blobs[name]
        return BlobProperties(name, len(data), MTIME, content_type)

    def download(self, name):
        self._record("download", name)
        if name not in self.blobs:
            raise StoreFault(f"no such blob {name}")
        return io.BytesIO(self.blobs[name][0])

    def upload(self, name, data, content_type=None):
        self._record("upload", name)
        if not isinstance(data, bytes):
            data = data.read()
        self.blobs[name] = (data, content_type)

    def delete(self, name):
        self._record("delete", name)
        if name not in self.blobs:
            raise StoreFault(f"no such blob {name}")
        del self.blobs[name]

    def delete_if_exists(self, name):
        self._record("delete_if_exists", name)
        self.blobs.pop(name, None)

    def copy(self, source, destination):
        self._record("copy", source)
        if source not in self.blobs:
            raise StoreFault(f"no such blob {source}")
        self.blobs[destination] = self.blobs[source]

    def list_page(self, prefix=None, delimiter=None, marker="", max_results=None):
        self._record("list_page", prefix)
        prefix = prefix or ""
        entries = []
        for name in sorted(self.blobs):
            if not name.startswith(prefix):
                continue
            rest = name[len(prefix) :]
            if delimiter and delimiter in rest:
                group = prefix + rest.split(delimiter, 1)[0] + delimiter
                if group not in entries:
                    entries.append(group)
            else:
                entries.append(name)
        # markers name the last entry returned, like the real stores
        remaining = [e for e in entries if e > marker] if marker else entries
        window = remaining[: min(max_results or self.page_size, self.page_size)]
        return ListingPage(
            prefixes=tuple(e for e in window if e not in self.blobs),
            blobs=tuple(
                BlobProperties(e, len(self.blobs[e][0]), MTIME, self.blobs[e][1])
                for e in window
                if e in self.blobs
            ),
            next_marker=window[-1] if len(remaining) > len(window) else "",
        )

    def signed_url(self, values):
        self._record("signed_url", values.blob_name)
        return f"memory://{self.name}/{values.blob_name}?sp={values.permissions}"


@pytest.fixture
def container():
    return InMemoryContainer()


@pytest.fixture
def adapter(container):
    return BlobStorageAdapter(container)
