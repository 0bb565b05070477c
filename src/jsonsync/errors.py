"""Exception hierarchy for jsonsync."""

from typing import Any, Optional


class JsonSyncError(Exception):
    """Base class for every error raised by jsonsync."""


class ConfigurationError(JsonSyncError):
    """Raised when a client, synchronizer or config file is set up incorrectly."""


class ExhaustedPaginationError(JsonSyncError):
    """Raised by ``load_more`` once every page of a resource has been loaded."""

    def __init__(self, message: str = "There are no more resources to load.") -> None:
        super().__init__(message)


class RequestError(JsonSyncError):
    """A backend or transport failure.

    ``payload`` is the error body returned by the server (decoded JSON when
    possible), never the raw transport exception. It is ``None`` when the
    request did not reach the server.
    """

    def __init__(
        self,
        payload: Any = None,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
    ) -> None:
        msg = message or f"Request failed with status {status_code}"
        super().__init__(msg)
        self.payload = payload
        self.status_code = status_code
