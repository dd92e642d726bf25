"""Shared test fixtures for shh tests."""

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from shh.config import ShhConfig
from shh.crypt.lifecycle import configure

FAKE_KEY = b"\x00GITCRYPTKEY\x00shh-test-key"


class FakeGitCrypt:
    """Stand-in for the git-crypt binary working on the test repository files.

    Attributes:
        calls: Argument lists of every invocation, binary excluded.
        fail: Optional mapping from operation name to (returncode, stderr).

    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.fail: dict[str, tuple[int, str]] = {}

    @staticmethod
    def key_path(cwd: Path) -> Path:
        return cwd / ".git" / "git-crypt" / "keys" / "shh"

    def __call__(self, cmd, cwd=None, **kwargs):  # noqa: ARG002
        args = list(cmd[1:])
        self.calls.append(args)
        operation = args[0]
        root = Path(cwd)
        key_path = self.key_path(root)

        if operation in self.fail:
            returncode, stderr = self.fail[operation]
            raise subprocess.CalledProcessError(returncode, cmd, output="", stderr=stderr)

        match operation:
            case "init":
                if key_path.exists():
                    raise subprocess.CalledProcessError(
                        1, cmd, output="", stderr="Error: this repository has already been initialized with git-crypt."
                    )
                key_path.parent.mkdir(parents=True, exist_ok=True)
                key_path.write_bytes(FAKE_KEY)
            case "export-key":
                if not key_path.exists():
                    raise subprocess.CalledProcessError(1, cmd, output="", stderr="Error: key not found")
                Path(args[-1]).write_bytes(key_path.read_bytes())
            case "unlock":
                key_path.parent.mkdir(parents=True, exist_ok=True)
                key_path.write_bytes(Path(args[1]).read_bytes())
            case "lock":
                key_path.unlink(missing_ok=True)

        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")

    @property
    def operations(self) -> list[str]:
        return [args[0] for args in self.calls]


@pytest.fixture
def mock_which():
    """Pretend git-crypt is installed."""
    with patch("shh.crypt.git_crypt.shutil.which", return_value="/usr/bin/git-crypt") as mock:
        yield mock


@pytest.fixture
def fake_git_crypt(mock_which):  # noqa: ARG001
    """Replace subprocess.run with a filesystem backed git-crypt emulation."""
    fake = FakeGitCrypt()
    with patch("subprocess.run", side_effect=fake):
        yield fake


@pytest.fixture
def repo(tmp_path):
    """A git working tree with a dev and a prod environment and a template."""
    (tmp_path / ".git").mkdir()
    env = tmp_path / "env"
    env.mkdir()
    (env / ".env.dev").write_text("API_URL=http://localhost\nDEBUG=1\n")
    (env / ".env.prod").write_text("API_URL=https://example.com\nDEBUG=\n")
    (env / ".env.template").write_text("# Environment: [name]\nAPI_URL=\n")
    return tmp_path


@pytest.fixture
def config(repo):
    """Default configuration for the test repository."""
    return ShhConfig(cwd=str(repo))


@pytest.fixture
def ready_repo(config, fake_git_crypt):  # noqa: ARG001
    """The test repository after a successful configure."""
    configure(config)
    return config


@pytest.fixture
def fake_key():
    """Raw key bytes generated by the fake git-crypt."""
    return FAKE_KEY
