"""Configuration loading for shh.

Configuration is resolved from three layers, later layers winning:
built-in defaults, the ``.shhrc`` file in the working directory and the
options given on the command line. The encoded key is never read from or
written to the config file.
"""

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from icecream import ic

from shh.exceptions import ValidationError

CONFIG_FILE = ".shhrc"

DEFAULTS: dict[str, Any] = {
    "environments": "./env/.env.[name]",
    "target": ".env",
    "template": "./env/.env.template",
    "copy": False,
    "encrypt": True,
}

_BOOLEAN_FIELDS = ("copy", "encrypt")


@dataclass(frozen=True, slots=True)
class ShhConfig:
    """Fully resolved configuration for a single command invocation.

    Attributes:
        cwd: Absolute path of the working tree root.
        environments: Naming pattern of the environment files.
        target: Path the selected environment is installed to.
        template: Path of the template used for new environments.
        copy: Copy the environment file instead of symlinking it.
        encrypt: Whether environment files are encrypted with git-crypt.
        encoded_key: Optional base64 encoded key supplied from outside.

    """

    cwd: str
    environments: str = DEFAULTS["environments"]
    target: str = DEFAULTS["target"]
    template: str = DEFAULTS["template"]
    copy: bool = DEFAULTS["copy"]
    encrypt: bool = DEFAULTS["encrypt"]
    encoded_key: str | None = None

    def resolve(self, path: str) -> str:
        """Resolve a path relative to the working directory."""
        return os.path.abspath(os.path.join(self.cwd, path))

    def __repr__(self) -> str:
        """Return a string representation that never exposes the key."""
        key = "<set>" if self.encoded_key else None
        return (
            f"ShhConfig(cwd={self.cwd!r}, environments={self.environments!r}, "
            f"target={self.target!r}, template={self.template!r}, copy={self.copy!r}, "
            f"encrypt={self.encrypt!r}, encoded_key={key!r})"
        )


def read_config_file(cwd: str) -> dict[str, Any]:
    """Read the ``.shhrc`` file of a working directory.

    Args:
        cwd: The working directory.

    Returns:
        The configured values, or an empty dict when there is no file.

    Raises:
        ValidationError: If the file is malformed or holds unknown keys.

    """
    path = Path(cwd) / CONFIG_FILE
    if not path.exists():
        return {}

    try:
        with path.open() as stream:
            data = yaml.safe_load(stream)
    except yaml.YAMLError as err:
        raise ValidationError(f"Config file '{path}' is malformed: {err}") from err

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"Config file '{path}' must contain a mapping")

    unknown = sorted(set(data) - set(DEFAULTS))
    if unknown:
        raise ValidationError(f"Config file '{path}' has unknown keys: {', '.join(unknown)}")

    for field in _BOOLEAN_FIELDS:
        if field in data and not isinstance(data[field], bool):
            raise ValidationError(f"Config option '{field}' must be true or false")

    ic(data)
    return data


def load_config(cwd: str | None = None, *, encoded_key: str | None = None, **overrides: Any) -> ShhConfig:
    """Resolve the configuration for the given working directory.

    Args:
        cwd: The working directory, defaults to the process working directory.
        encoded_key: Optional base64 encoded key.
        **overrides: Option values from the command line; ``None`` values
            are ignored so unset options fall through to lower layers.

    Returns:
        The resolved configuration.

    Raises:
        ValidationError: If the config file is invalid or an override is unknown.

    """
    root = os.path.abspath(cwd or os.getcwd())

    unknown = sorted(set(overrides) - set(DEFAULTS))
    if unknown:
        raise ValidationError(f"Unknown config options: {', '.join(unknown)}")

    values = {**DEFAULTS, **read_config_file(root)}
    values.update({key: value for key, value in overrides.items() if value is not None})

    return ShhConfig(cwd=root, encoded_key=encoded_key or None, **values)


def write_config(config: ShhConfig) -> Path:
    """Persist the non-secret configuration values to ``.shhrc``.

    Args:
        config: The configuration to write.

    Returns:
        The path of the written file.

    """
    path = Path(config.cwd) / CONFIG_FILE
    data = {key: value for key, value in dataclasses.asdict(config).items() if key in DEFAULTS}

    with path.open("w") as stream:
        yaml.safe_dump(data, stream, sort_keys=False)

    return path
