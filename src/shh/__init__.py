"""shh: per-environment secret files, encrypted at rest with git-crypt.

This package discovers environment files through a naming pattern,
installs the selected one at a target path and manages the git-crypt setup
that keeps those files encrypted in the repository.

Example usage:
    from shh import get_environments, get_status, load_config

    config = load_config("/path/to/project")
    print(get_status(config))

    for environment in get_environments(config):
        print(environment.name, environment.relative)
"""

__version__ = "1.0.0"

from shh.config import ShhConfig, load_config
from shh.crypt.lifecycle import configure, get_key, get_status, lock, unlock
from shh.environments import create_environment, get_environments, install_environment
from shh.exceptions import (
    BinaryNotFoundError,
    DiscoveryError,
    ExternalToolError,
    PatternError,
    PreconditionError,
    ShhError,
    ValidationError,
)
from shh.models import Environment, RepositoryStatus

__all__ = [
    # Version
    "__version__",
    # Configuration
    "ShhConfig",
    "load_config",
    # Environments
    "Environment",
    "create_environment",
    "get_environments",
    "install_environment",
    # Lifecycle
    "RepositoryStatus",
    "configure",
    "get_key",
    "get_status",
    "lock",
    "unlock",
    # Exceptions
    "ShhError",
    "BinaryNotFoundError",
    "DiscoveryError",
    "ExternalToolError",
    "PatternError",
    "PreconditionError",
    "ValidationError",
]
