"""Repository encryption lifecycle.

The repository status is never stored: it is recomputed from the
provisioning steps on every call.

- ``empty``: no provisioning evidence.
- ``locked``: attributes and ignore list are set up, but the key is absent.
- ``ready``: every provisioning step is done.
"""

from collections.abc import Mapping

from icecream import ic

from shh import console
from shh.config import ShhConfig
from shh.crypt.git_crypt import GitCrypt
from shh.crypt.keys import decode_key, encode_key
from shh.crypt.provisioning import STEPS, apply_steps
from shh.exceptions import (
    KeyMaterialMissingError,
    NotConfiguredError,
    PreconditionError,
    RepositoryLockedError,
    RepositoryUnlockedError,
)
from shh.models import RepositoryStatus, StepId

INIT_PRECONDITIONS: Mapping[RepositoryStatus, type[PreconditionError]] = {
    RepositoryStatus.LOCKED: RepositoryLockedError,
}

UNLOCK_PRECONDITIONS: Mapping[RepositoryStatus, type[PreconditionError]] = {
    RepositoryStatus.EMPTY: NotConfiguredError,
    RepositoryStatus.READY: RepositoryUnlockedError,
}

LOCK_PRECONDITIONS: Mapping[RepositoryStatus, type[PreconditionError]] = {
    RepositoryStatus.EMPTY: NotConfiguredError,
    RepositoryStatus.LOCKED: RepositoryLockedError,
}

EXPORT_KEY_PRECONDITIONS: Mapping[RepositoryStatus, type[PreconditionError]] = {
    RepositoryStatus.EMPTY: NotConfiguredError,
    RepositoryStatus.LOCKED: RepositoryLockedError,
}


def get_status(config: ShhConfig) -> RepositoryStatus:
    """Compute the current repository status from the filesystem.

    Args:
        config: The resolved configuration.

    Returns:
        The repository status.

    """
    done = {step.name: step.done(config) for step in STEPS}
    ic(done)

    if all(done.values()):
        return RepositoryStatus.READY
    if done[StepId.ATTRIBUTE_FILTER] and done[StepId.IGNORE_LIST]:
        return RepositoryStatus.LOCKED
    return RepositoryStatus.EMPTY


def ensure_status(
    config: ShhConfig,
    forbidden: Mapping[RepositoryStatus, type[PreconditionError]],
) -> RepositoryStatus:
    """Raise if the current repository status is forbidden.

    Args:
        config: The resolved configuration.
        forbidden: Mapping from disallowed statuses to the error to raise.

    Returns:
        The current status when it is allowed.

    Raises:
        PreconditionError: The error mapped to the current status.

    """
    status = get_status(config)
    error = forbidden.get(status)
    if error is not None:
        raise error(status)
    return status


def configure(config: ShhConfig) -> list[StepId]:
    """Apply every provisioning step that is not done yet.

    Safe to call repeatedly.

    Args:
        config: The resolved configuration.

    Returns:
        Identifiers of the steps that ran.

    """
    return apply_steps(config)


def unlock(config: ShhConfig, encoded_key: str) -> None:
    """Decrypt the repository with a base64 encoded key.

    The decoded key only lives in a temporary file for the duration of the
    git-crypt call. Afterwards the key is exported so the repository reads
    as ``ready``.

    Args:
        config: The resolved configuration.
        encoded_key: The base64 encoded key.

    Raises:
        ValidationError: If the key is not valid base64.
        ExternalToolError: If git-crypt fails.

    """
    key = decode_key(encoded_key)
    git_crypt = GitCrypt(config.cwd)

    with console.spinner("Unlocking repository..."):
        git_crypt.unlock_with_key(key)

    git_crypt.export_key()


def lock(config: ShhConfig) -> None:
    """Export the current key, then encrypt the repository.

    Args:
        config: The resolved configuration.

    Raises:
        ExternalToolError: If git-crypt fails.

    """
    git_crypt = GitCrypt(config.cwd)
    git_crypt.export_key()
    with console.spinner("Locking repository..."):
        git_crypt.lock()


def get_key(config: ShhConfig) -> str:
    """Return the exported key as base64.

    Args:
        config: The resolved configuration.

    Returns:
        The base64 encoded key.

    Raises:
        KeyMaterialMissingError: If no exported key exists.

    """
    export_path = GitCrypt(config.cwd).export_path
    if not export_path.exists():
        raise KeyMaterialMissingError(get_status(config))
    return encode_key(export_path.read_bytes())
