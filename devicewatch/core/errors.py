"""
Exception taxonomy for storage and insight failures
"""

from typing import Optional


class DeviceWatchError(Exception):
    """Base class for all service errors"""


class StorageUnavailable(DeviceWatchError):
    """The persistence layer could not be reached or rejected the statement"""


class InsightError(DeviceWatchError):
    """Base class for text-generation failures"""


class ServiceUnconfigured(InsightError):
    """No credentials are configured for the text-generation service"""


class UpstreamError(InsightError):
    """The text-generation service returned an error"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class QuotaExhausted(UpstreamError):
    """A single credential hit its rate limit or quota"""


class AllKeysExhausted(InsightError):
    """Every credential in the pool was rejected for quota"""


class MalformedUpstreamResponse(InsightError):
    """Generated text did not parse into the expected shape"""
