"""Environment file discovery, creation and installation.

Environment files are found through the glob derived from the naming
pattern and named through its strict matcher. A file accepted by the glob
but rejected by the matcher means the naming pattern is broken, so it is
reported instead of being skipped.
"""

import glob
import os
import re
import shutil
from collections.abc import Callable
from pathlib import Path

from icecream import ic

from shh.config import ShhConfig
from shh.exceptions import DiscoveryError, PatternError, ValidationError
from shh.models import Environment
from shh.patterns import PLACEHOLDER, render, to_glob, to_matcher

DEFAULT_TEMPLATE = f"# Environment: {PLACEHOLDER}\n"

_FILENAME_PATTERN = re.compile(r"^[\w\-.]+$")


def get_environments(config: ShhConfig, *, allow_empty: bool = False) -> list[Environment]:
    """Discover the environment files of a working tree.

    The template file is never reported as an environment.

    Args:
        config: The resolved configuration.
        allow_empty: Return an empty list instead of raising when nothing is found.

    Returns:
        The environments sorted by file path.

    Raises:
        PatternError: If a discovered file name cannot be resolved.
        DiscoveryError: If nothing is found and ``allow_empty`` is False.

    """
    pattern = os.path.join(glob.escape(config.cwd), to_glob(config.environments))
    template = config.resolve(config.template)
    ic(pattern)

    # Built lazily: a pattern without placeholder only fails once a file has to be named.
    match: Callable[[str], str | None] | None = None
    environments: list[Environment] = []
    for found in sorted(glob.glob(pattern, recursive=True)):
        file = os.path.abspath(found)
        if file == template or not os.path.isfile(file):
            continue

        if match is None:
            match = to_matcher(config.environments, config.cwd)

        name = match(file)
        if name is None:
            raise PatternError(f"Could not resolve environment name for file: '{file}'")

        environments.append(Environment(name=name, file=file, relative=os.path.relpath(file, config.cwd)))

    if not allow_empty and not environments:
        raise DiscoveryError(f"No environment found at '{config.environments}'")

    return environments


def find_environment(config: ShhConfig, name: str) -> Environment:
    """Find a discovered environment by name.

    Args:
        config: The resolved configuration.
        name: The environment name.

    Returns:
        The matching environment.

    Raises:
        DiscoveryError: If no environment has that name.

    """
    for environment in get_environments(config):
        if environment.name == name:
            return environment
    raise DiscoveryError(f"File not found for environment '{name}'")


def validate_name(name: str, config: ShhConfig) -> bool | str:
    """Validate the name of a new environment.

    Args:
        name: The candidate name.
        config: The resolved configuration.

    Returns:
        True if valid, or an error message string if invalid.

    """
    existing = [environment.name for environment in get_environments(config, allow_empty=True)]

    if name in existing:
        return f"Must be different from existing environments ({', '.join(existing)})"
    if not _FILENAME_PATTERN.match(name):
        return f"Must be a valid file name ({_FILENAME_PATTERN.pattern})"
    return True


def read_template(config: ShhConfig) -> str:
    """Read the template used for new environments, or the built-in default."""
    path = Path(config.resolve(config.template))
    return path.read_text() if path.is_file() else DEFAULT_TEMPLATE


def create_environment(name: str, config: ShhConfig) -> Path:
    """Create a new environment file from the template.

    Args:
        name: The environment name.
        config: The resolved configuration.

    Returns:
        The path of the created file.

    Raises:
        ValidationError: If the name is invalid or already taken.

    """
    result = validate_name(name, config)
    if result is not True:
        raise ValidationError(f"Invalid environment name '{name}': {result}")

    path = Path(config.resolve(render(config.environments, name)))
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(read_template(config).replace(PLACEHOLDER, name))
    ic(path)

    return path


def install_environment(environment: Environment, config: ShhConfig) -> Path:
    """Install an environment file at the configured target.

    Any existing target is removed first, then the environment file is
    either copied or symlinked depending on ``config.copy``.

    Args:
        environment: The environment to install.
        config: The resolved configuration.

    Returns:
        The target path.

    Raises:
        ValidationError: If the target path contains a wildcard.

    """
    target = Path(config.resolve(config.target))

    if "*" in str(target):
        raise ValidationError(f"Invalid target env file path: '{target}'")

    if target.is_symlink() or target.exists():
        target.unlink()

    if config.copy:
        shutil.copyfile(environment.file, target)
    else:
        target.symlink_to(environment.file)

    ic(target)
    return target
