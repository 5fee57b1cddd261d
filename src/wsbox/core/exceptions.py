"""Custom exceptions for wsbox.

Every failure path surfaces one of these so the CLI can tell "not found"
apart from "in use / failed".
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .cleanup import CleanupResult


class WsboxError(Exception):
    """Base class for all wsbox errors."""


class ConfigError(WsboxError):
    """Raised for invalid options or flag combinations.

    Always raised before any engine interaction.
    """


class NotFoundError(WsboxError):
    """Raised when a workspace record or an image does not exist."""


class EngineError(WsboxError):
    """Raised when a container engine call fails.

    Args:
        message: Human readable description of the failed call.
        returncode: Exit status of the engine process, if it ran.
        stderr: Captured error output, if any.
    """

    def __init__(
        self,
        message: str,
        returncode: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class PartialFailure(WsboxError):
    """Raised when a cleanup pass removed some but not all planned images."""

    def __init__(self, result: "CleanupResult"):
        self.result = result
        super().__init__(
            f"Removed {len(result.removed)} image(s), "
            f"{len(result.failed)} could not be removed: "
            + ", ".join(sorted(result.failed))
        )
