"""Error taxonomy for the action resolution and passthrough pipeline."""

from typing import List, Optional


class PicaError(Exception):
    """Base class for all toolkit errors."""


class FormatError(PicaError, ValueError):
    """Malformed action identifier or connection key."""


class MissingVariableError(PicaError, ValueError):
    """One or more path template placeholders could not be resolved."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(
            f"Missing required path variables: {', '.join(self.missing)}. "
            f"Please provide values for these variables."
        )


class AccessError(PicaError):
    """Connection (or action set) is not visible to the caller."""


class UnknownActionError(PicaError):
    """Action identifier has no resolvable metadata."""


class RemoteError(PicaError):
    """Transport or remote-service failure during discovery."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)
