"""Custom exception classes for bridgefetch."""

from typing import Optional


class BridgeFetchError(Exception):
    """
    Base exception class for all bridgefetch errors.
    """
    pass


class ConfigError(BridgeFetchError):
    """
    Raised when client construction options are malformed.
    """
    pass


class ValidationError(BridgeFetchError):
    """
    Raised when a file request is missing required fields or has wrong types.
    """
    pass


class ClientClosedError(BridgeFetchError):
    """
    Raised when a destroyed client is asked to track a new file.
    """
    pass


class InvalidStateTransition(BridgeFetchError):
    """
    Raised when a tracked file is moved backwards or out of a terminal state.
    """
    pass


class BridgeRequestError(BridgeFetchError):
    """
    Raised when the bridge or a farmer answers with an error or cannot be reached.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, code: str = "UNKNOWN"):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class DownloadError(BridgeFetchError):
    """
    Base class for failures inside a file's download pipeline.

    These are never raised from Client.add; they are delivered through the
    client's error path.
    """

    def __init__(self, message: str, file_id: Optional[str] = None):
        super().__init__(message)
        self.file_id = file_id


class ResolutionError(DownloadError):
    """
    Raised when a bucket id cannot be derived from user and bucket name.
    """
    pass


class TokenError(DownloadError):
    """
    Raised when the bridge refuses or fails to issue an access token.
    """
    pass


class PointerError(DownloadError):
    """
    Raised when the pointer list for a file cannot be retrieved.
    """
    pass


class TransferError(DownloadError):
    """
    Raised when a shard cannot be fetched or stored.
    """
    pass
