"""Custom exception classes for the Insights service."""


class InsightsException(Exception):
    """
    Base exception class for all Insights errors.
    """
    pass


class InvalidCredentialError(InsightsException):
    """
    Raised when the object store rejects a supplied access key / secret.
    """
    pass


class NotConnectedError(InsightsException):
    """
    Raised when an operation needs a stored credential and none is present.
    """
    pass


class RemoteTransportError(InsightsException):
    """
    Raised when a bucket or object listing call to the object store fails.
    """

    def __init__(self, message: str, bucket: str = None):
        super().__init__(message)
        self.bucket = bucket


class LocalDataError(InsightsException):
    """
    Raised when local file or folder records cannot be read.
    """
    pass


class ReportTimeoutError(InsightsException):
    """
    Raised when a report computation exceeds its overall deadline.
    """
    pass


class InvalidAPIKeyError(InsightsException):
    """
    Raised when an API Key is missing, malformed or unknown.
    """
    pass
