"""Tests for crypt/git_crypt.py module."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from shh.crypt.git_crypt import GitCrypt, is_already_initialized
from shh.exceptions import BinaryNotFoundError, ExternalToolError


def _failure(stderr: str, returncode: int = 1) -> subprocess.CalledProcessError:
    return subprocess.CalledProcessError(returncode, ["git-crypt"], output="", stderr=stderr)


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for command execution."""
    with patch("subprocess.run") as mock:
        mock.return_value = MagicMock(returncode=0, stdout="", stderr="")
        yield mock


class TestAlreadyInitialized:
    """Tests for the already-initialized message predicate."""

    def test_recognises_message(self):
        """Test the git-crypt message is recognised."""
        assert is_already_initialized("Error: this repository has already been initialized with git-crypt.")

    def test_case_insensitive(self):
        """Test the match ignores case."""
        assert is_already_initialized("ALREADY BEEN INITIALIZED")

    def test_other_errors(self):
        """Test unrelated errors are not recognised."""
        assert not is_already_initialized("Error: not a git repository")
        assert not is_already_initialized("")


class TestGitCryptPaths:
    """Tests for key locations."""

    def test_paths(self, tmp_path):
        """Test key and export paths live inside .git."""
        git_crypt = GitCrypt(str(tmp_path))

        assert git_crypt.key_path == tmp_path / ".git" / "git-crypt" / "keys" / "shh"
        assert git_crypt.export_path == tmp_path / ".git" / "shh" / "key"

    def test_repr(self, tmp_path):
        """Test the debugging representation."""
        assert "key_name='shh'" in repr(GitCrypt(str(tmp_path)))


class TestGitCryptBinary:
    """Tests for binary resolution."""

    def test_binary_not_found(self, tmp_path):
        """Test a missing binary raises a dedicated error."""
        with patch("shh.crypt.git_crypt.shutil.which", return_value=None):
            with pytest.raises(BinaryNotFoundError, match="git-crypt binary not found"):
                GitCrypt(str(tmp_path)).lock()

    def test_is_available(self):
        """Test availability follows PATH lookup."""
        with patch("shh.crypt.git_crypt.shutil.which", return_value="/usr/bin/git-crypt"):
            assert GitCrypt.is_available()
        with patch("shh.crypt.git_crypt.shutil.which", return_value=None):
            assert not GitCrypt.is_available()

    def test_binary_not_executable(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test a binary that cannot be executed."""
        mock_subprocess.side_effect = FileNotFoundError()

        with pytest.raises(BinaryNotFoundError, match="Cannot execute"):
            GitCrypt(str(tmp_path)).lock()


class TestGitCryptCommands:
    """Tests for the git-crypt operations."""

    def test_init(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test init generates the named key in the working tree."""
        GitCrypt(str(tmp_path)).init()

        mock_subprocess.assert_called_once()
        assert mock_subprocess.call_args[0][0] == ["/usr/bin/git-crypt", "init", "--key-name", "shh"]
        assert mock_subprocess.call_args[1]["cwd"] == Path(tmp_path)
        assert mock_subprocess.call_args[1]["check"] is True

    def test_init_already_initialized(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test an already initialized repository is accepted."""
        mock_subprocess.side_effect = _failure("Error: this repository has already been initialized with git-crypt.")

        GitCrypt(str(tmp_path)).init()

    def test_init_failure(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test other init errors are fatal."""
        mock_subprocess.side_effect = _failure("Error: not a git repository", returncode=128)

        with pytest.raises(ExternalToolError) as exc_info:
            GitCrypt(str(tmp_path)).init()

        assert exc_info.value.returncode == 128
        assert exc_info.value.stderr == "Error: not a git repository"
        assert "exit code 128" in str(exc_info.value)

    def test_export_key(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test the key is exported to the default location."""
        git_crypt = GitCrypt(str(tmp_path))
        path = git_crypt.export_key()

        assert path == git_crypt.export_path
        assert path.parent.is_dir()
        assert mock_subprocess.call_args[0][0] == [
            "/usr/bin/git-crypt",
            "export-key",
            "--key-name",
            "shh",
            str(git_crypt.export_path),
        ]

    def test_export_key_to_path(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test the key can be exported elsewhere."""
        destination = tmp_path / "backup" / "shh.key"
        assert GitCrypt(str(tmp_path)).export_key(destination) == destination
        assert mock_subprocess.call_args[0][0][-1] == str(destination)

    def test_unlock(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test unlock passes the key file."""
        GitCrypt(str(tmp_path)).unlock(tmp_path / "key")
        assert mock_subprocess.call_args[0][0] == ["/usr/bin/git-crypt", "unlock", str(tmp_path / "key")]

    def test_unlock_failure(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test unlock failures are reported."""
        mock_subprocess.side_effect = _failure("Error: Working directory not clean.")

        with pytest.raises(ExternalToolError, match="Working directory not clean"):
            GitCrypt(str(tmp_path)).unlock(tmp_path / "key")

    def test_unlock_with_key(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test raw key bytes are handed to git-crypt through a temporary file."""
        seen = {}

        def run(cmd, **kwargs):  # noqa: ARG001
            seen["key"] = Path(cmd[-1]).read_bytes()
            return MagicMock(returncode=0, stdout="", stderr="")

        mock_subprocess.side_effect = run

        GitCrypt(str(tmp_path)).unlock_with_key(b"raw-key")

        cmd = mock_subprocess.call_args[0][0]
        assert cmd[:2] == ["/usr/bin/git-crypt", "unlock"]
        assert seen["key"] == b"raw-key"
        assert not Path(cmd[-1]).exists()

    def test_unlock_with_key_failure_removes_file(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test the temporary key file is removed when unlock fails."""
        mock_subprocess.side_effect = _failure("Error: Working directory not clean.")

        with pytest.raises(ExternalToolError):
            GitCrypt(str(tmp_path)).unlock_with_key(b"raw-key")

        assert not Path(mock_subprocess.call_args[0][0][-1]).exists()

    def test_lock(self, tmp_path, mock_which, mock_subprocess):  # noqa: ARG002
        """Test lock targets the shh key."""
        GitCrypt(str(tmp_path)).lock()
        assert mock_subprocess.call_args[0][0] == ["/usr/bin/git-crypt", "lock", "--key-name", "shh"]
