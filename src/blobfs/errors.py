import contextlib
import logging


logger = logging.getLogger(__name__)


class StoreOperationError(Exception):
    """Wraps SDK errors to avoid leaking cloud infrastructure details."""


class FilesystemException(Exception):
    """Base class of every error raised by a filesystem adapter."""


class FilesystemOperationFailed(FilesystemException):
    """A filesystem operation failed at a location.

    The underlying fault, when there is one, is chained as ``__cause__``
    and also available as ``previous``.
    """

    operation = "UNKNOWN"
    verb = "perform operation"

    def __init__(self, location, reason=""):
        self.location = location
        self.reason = reason
        super().__init__(self._message())

    def _message(self):
        message = f"Unable to {self.verb} at location: {self.location}."
        if self.reason:
            message = f"{message} {self.reason}"
        return message

    @property
    def previous(self):
        return self.__cause__


class UnableToCheckExistence(FilesystemOperationFailed):
    operation = "EXISTENCE_CHECK"
    verb = "check existence"


class UnableToWriteFile(FilesystemOperationFailed):
    operation = "WRITE"
    verb = "write file"


class UnableToReadFile(FilesystemOperationFailed):
    operation = "READ"
    verb = "read file"


class UnableToDeleteFile(FilesystemOperationFailed):
    operation = "DELETE"
    verb = "delete file"


class UnableToDeleteDirectory(FilesystemOperationFailed):
    operation = "DELETE_DIRECTORY"
    verb = "delete directory"


class UnableToSetVisibility(FilesystemOperationFailed):
    operation = "SET_VISIBILITY"
    verb = "set visibility"


class UnableToListContents(FilesystemOperationFailed):
    operation = "LIST_CONTENTS"

    def __init__(self, location, deep, reason=""):
        self.deep = deep
        super().__init__(location, reason)

    def _message(self):
        kind = "deep" if self.deep else "shallow"
        message = f"Unable to list contents for '{self.location}', {kind} listing."
        if self.reason:
            message = f"{message} {self.reason}"
        return message


class UnableToRetrieveMetadata(FilesystemOperationFailed):
    MIME_TYPE = "mime_type"
    LAST_MODIFIED = "last_modified"
    FILE_SIZE = "file_size"
    VISIBILITY = "visibility"

    operation = "RETRIEVE_METADATA"

    def __init__(self, location, metadata_type, reason=""):
        self.metadata_type = metadata_type
        super().__init__(location, reason)

    def _message(self):
        message = (
            f"Unable to retrieve the {self.metadata_type} "
            f"for file at location: {self.location}."
        )
        if self.reason:
            message = f"{message} {self.reason}"
        return message


class _TransferFailed(FilesystemOperationFailed):
    def __init__(self, source, destination, reason=""):
        self.source = source
        self.destination = destination
        super().__init__(source, reason)

    def _message(self):
        message = (
            f"Unable to {self.verb} from {self.source} to {self.destination}."
        )
        if self.reason:
            message = f"{message} {self.reason}"
        return message


class UnableToCopyFile(_TransferFailed):
    operation = "COPY"
    verb = "copy file"


class UnableToMoveFile(_TransferFailed):
    operation = "MOVE"
    verb = "move file"


@contextlib.contextmanager
def translated(error_class, *args, **kwargs):
    """Re-raise any failure in the block as ``error_class(*args, **kwargs)``.

    The original exception is chained as the cause.
    """
    try:
        yield
    except Exception as e:
        error = error_class(*args, **kwargs)
        logger.debug("%s failed: %r", error.operation, e)
        raise error from e
