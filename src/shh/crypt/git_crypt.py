"""git-crypt binary wrapper.

This module provides the GitCrypt class which runs the git-crypt
operations shh relies on and translates their failures into exceptions.
"""

import contextlib
import os
import shutil
import subprocess
import tempfile
from pathlib import Path

from icecream import ic

from shh.exceptions import BinaryNotFoundError, ExternalToolError

KEY_NAME = "shh"

_ALREADY_INITIALIZED_MESSAGE = "already been initialized"


def is_already_initialized(stderr: str) -> bool:
    """Tell whether git-crypt refused to init because it already did.

    git-crypt reports this condition only through its error message, so
    this is the single place matching against it.

    Args:
        stderr: Standard error output of ``git-crypt init``.

    Returns:
        True if the output reports an already initialized repository.

    """
    return _ALREADY_INITIALIZED_MESSAGE in stderr.lower()


class GitCrypt:
    """Runs git-crypt commands against a working tree.

    Attributes:
        cwd: Root of the working tree.
        key_name: Name of the git-crypt key managed by shh.
        key_path: Where git-crypt keeps the key once the repository is unlocked.
        export_path: Where shh keeps an exported copy of the key.

    """

    def __init__(self, cwd: str, key_name: str = KEY_NAME) -> None:
        """Initialize GitCrypt for a working tree.

        Args:
            cwd: Root of the working tree.
            key_name: Name of the git-crypt key.

        """
        self.cwd: Path = Path(cwd)
        self.key_name: str = key_name
        self.key_path: Path = self.cwd / ".git" / "git-crypt" / "keys" / key_name
        self.export_path: Path = self.cwd / ".git" / key_name / "key"
        self._binary: str | None = None

    def __repr__(self) -> str:
        """Return a detailed string representation for debugging."""
        return f"GitCrypt(cwd={str(self.cwd)!r}, key_name={self.key_name!r})"

    @staticmethod
    def is_available() -> bool:
        """Tell whether git-crypt is installed and on PATH."""
        return shutil.which("git-crypt") is not None

    @property
    def binary(self) -> str:
        """Path to the git-crypt binary.

        Raises:
            BinaryNotFoundError: If git-crypt is not found in PATH.

        """
        if self._binary is None:
            binary = shutil.which("git-crypt")
            if binary is None:
                raise BinaryNotFoundError(
                    "git-crypt binary not found. Please install git-crypt or ensure it's in your PATH. "
                    "See: https://github.com/AGWA/git-crypt#installing-git-crypt"
                )
            self._binary = binary
        return self._binary

    def _run(self, *args: str) -> subprocess.CompletedProcess[str]:
        """Run a git-crypt command in the working tree.

        Args:
            *args: Arguments passed to git-crypt.

        Returns:
            The completed process.

        Raises:
            BinaryNotFoundError: If the binary cannot be executed.
            ExternalToolError: If git-crypt exits with a non-zero code.

        """
        cmd = [self.binary, *args]
        ic(cmd)

        try:
            return subprocess.run(cmd, cwd=self.cwd, capture_output=True, text=True, check=True)
        except FileNotFoundError as err:
            raise BinaryNotFoundError(f"Cannot execute git-crypt at '{self.binary}'") from err
        except subprocess.CalledProcessError as err:
            stderr = (err.stderr or "").strip()
            details = f" - {stderr}" if stderr else ""
            raise ExternalToolError(
                f"git-crypt {args[0]} failed (exit code {err.returncode}){details}",
                returncode=err.returncode,
                stderr=stderr,
            ) from err

    def init(self) -> None:
        """Generate the shh key, accepting an already initialized repository."""
        try:
            self._run("init", "--key-name", self.key_name)
        except ExternalToolError as err:
            if not is_already_initialized(err.stderr):
                raise
            ic(err.stderr)

    def export_key(self, path: Path | None = None) -> Path:
        """Export the shh key to a file.

        Args:
            path: Destination file, defaults to ``export_path``.

        Returns:
            The path the key was written to.

        """
        destination = path or self.export_path
        destination.parent.mkdir(parents=True, exist_ok=True)
        self._run("export-key", "--key-name", self.key_name, str(destination))
        return destination

    def unlock(self, key_file: Path) -> None:
        """Decrypt the working tree with the key stored in ``key_file``."""
        self._run("unlock", str(key_file))

    def lock(self) -> None:
        """Encrypt the working tree and forget the shh key."""
        self._run("lock", "--key-name", self.key_name)

    def unlock_with_key(self, key: bytes) -> None:
        """Decrypt the working tree with raw key bytes.

        The key only lives in a temporary file for the duration of the
        git-crypt call and is removed even when the call fails.

        Args:
            key: The raw git-crypt key.

        """
        fd, name = tempfile.mkstemp(prefix="shh-", suffix=".key")
        key_file = Path(name)
        try:
            with os.fdopen(fd, "wb") as stream:
                stream.write(key)
            self.unlock(key_file)
        finally:
            with contextlib.suppress(OSError):
                key_file.unlink(missing_ok=True)
