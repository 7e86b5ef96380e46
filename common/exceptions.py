"""Exception classes shared by the storage and HTTP layers."""


class FileServerException(Exception):
    """
    Base exception class for all file server errors.
    """
    pass


class ConfigError(FileServerException):
    """
    Raised when the server configuration is missing or invalid.
    """
    pass


class NotFoundError(FileServerException):
    """
    Raised when a requested path does not resolve to an entry under the root.
    """
    pass


class InvalidPathError(FileServerException):
    """
    Raised when a requested path would escape the served root directory.
    """
    pass


class IOFaultError(FileServerException):
    """
    Raised when opening, seeking or reading a file fails for a reason other than end-of-file.
    """
    pass


class StreamReadError(IOFaultError):
    """
    Raised to the consumer of a chunk stream when a read fails mid-transfer.
    """

    def __init__(self, message: str, bytes_read: int = 0):
        super().__init__(message)
        self.bytes_read = bytes_read


class RangeError(FileServerException):
    """
    Base class for Range header failures; always answered with 416.
    """
    pass


class MalformedRangeError(RangeError):
    """
    Raised when a Range header violates the bytes=start-end syntax.
    """
    pass


class RangeNotSatisfiableError(RangeError):
    """
    Raised when a syntactically valid Range header has no unit overlapping the resource.
    """
    pass
