"""
Domain errors

None of these are fatal: the session keeps its image and credentials
so the user can retry.
"""
from typing import Optional


class VisionError(Exception):
    """Base class for all user-visible errors"""
    kind = "VisionError"


class MissingCredential(VisionError):
    """No API key has been entered"""
    kind = "MissingCredential"


class MissingEndpoint(VisionError):
    """The service needs an explicit endpoint and none was given"""
    kind = "MissingEndpoint"


class NoImageSelected(VisionError):
    """No image has been loaded yet"""
    kind = "NoImageSelected"


class ImageUnreadable(VisionError):
    """The image path or bytes could not be opened as an image"""
    kind = "ImageUnreadable"


class SubmissionError(VisionError):
    """The remote service rejected a request or returned no operation handle"""
    kind = "SubmissionError"


class RemoteOperationFailed(VisionError):
    """A long-running remote job reached the Failed status"""
    kind = "RemoteOperationFailed"

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason
        message = "Remote operation failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidRegion(VisionError):
    """Detection geometry returned by the service is malformed"""
    kind = "InvalidRegion"


class ServiceRequestError(VisionError):
    """Transport or HTTP level failure talking to the remote service"""
    kind = "ServiceRequestError"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class OperationInProgress(VisionError):
    """Another analysis or text extraction is still running"""
    kind = "OperationInProgress"


class OperationCancelled(VisionError):
    """The in-flight operation was cancelled between status queries"""
    kind = "OperationCancelled"
