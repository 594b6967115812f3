"""Custom exceptions for gochanged."""


class GoChangedError(Exception):
    """Base exception for all gochanged errors."""


class InputError(GoChangedError):
    """Malformed diff entries or module descriptors."""


class NotFoundError(GoChangedError):
    """A file does not exist at the requested revision."""

    def __init__(self, path: str, revision: str, detail: str = ""):
        self.path = path
        self.revision = revision
        message = f"{path} does not exist at revision '{revision or 'index'}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ToolchainError(GoChangedError):
    """An external command failed or produced output we could not read."""

    def __init__(self, command: list[str], detail: str = ""):
        self.command = command
        self.detail = detail.strip()
        message = f"command failed: {' '.join(command)}"
        if self.detail:
            message = f"{message}\n{self.detail}"
        super().__init__(message)


class ConfigurationError(GoChangedError):
    """The module layout or configuration cannot be analyzed."""
