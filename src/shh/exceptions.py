"""Custom exceptions for shh.

This module defines the exception hierarchy used throughout the application.
Errors are raised to the immediate caller and never retried; the CLI layer
decides how they are presented.
"""

from shh.models import RepositoryStatus


class ShhError(Exception):
    """Base exception for all shh errors.

    All custom exceptions in this package inherit from this class,
    allowing callers to catch all shh errors with a single
    except clause if desired.
    """

    pass


class PatternError(ShhError):
    """Raised when a naming pattern cannot be used.

    This can occur when:
    - The pattern has no ``[name]`` placeholder where a name is required
    - The pattern has more than one placeholder
    - A file matched the discovery glob but not the stricter name matcher
    """

    pass


class DiscoveryError(ShhError):
    """Raised when no environment files are found and empty results are not allowed."""

    pass


class ValidationError(ShhError):
    """Raised when user input fails validation.

    This can occur when:
    - A new environment name is not unique or not a safe filename
    - An encoded key is not valid base64
    - The configuration file contains unknown or malformed values
    """

    pass


class PreconditionError(ShhError):
    """Raised when the repository status forbids the requested operation.

    Attributes:
        status: The repository status that blocked the operation.
        remedy: Human readable hint on how to get out of this status.

    """

    def __init__(self, message: str, *, status: RepositoryStatus, remedy: str = "") -> None:
        self.status = status
        self.remedy = remedy
        super().__init__(f"{message} {remedy}".strip())


class NotConfiguredError(PreconditionError):
    """Raised when the repository has no encryption setup at all."""

    def __init__(self, status: RepositoryStatus = RepositoryStatus.EMPTY) -> None:
        super().__init__("Repository not configured.", status=status, remedy="Run `shh init` first.")


class RepositoryLockedError(PreconditionError):
    """Raised when the repository is configured but the key is not available."""

    def __init__(self, status: RepositoryStatus = RepositoryStatus.LOCKED) -> None:
        super().__init__("Repository is locked.", status=status, remedy="Unlock it first with `shh unlock`.")


class RepositoryUnlockedError(PreconditionError):
    """Raised when an unlock is requested on an already unlocked repository."""

    def __init__(self, status: RepositoryStatus = RepositoryStatus.READY) -> None:
        super().__init__("Repository already unlocked.", status=status)


class KeyMaterialMissingError(PreconditionError):
    """Raised when the exported key file is expected but absent."""

    def __init__(self, status: RepositoryStatus = RepositoryStatus.LOCKED) -> None:
        super().__init__("Key material not found.", status=status, remedy="Unlock the repository first.")


class ExternalToolError(ShhError):
    """Raised when git-crypt exits with an unexpected non-zero code.

    Attributes:
        returncode: The process exit code, if the process was started.
        stderr: Captured standard error output.

    """

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class BinaryNotFoundError(ExternalToolError):
    """Raised when the git-crypt binary is not found in PATH."""

    pass
