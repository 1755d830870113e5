from blobfs.adapter import BlobStorageAdapter
from blobfs.attributes import DirectoryAttributes
from blobfs.attributes import FileAttributes


__all__ = ["BlobStorageAdapter", "DirectoryAttributes", "FileAttributes"]
