"""Data models for shh.

This module provides the small value types shared between the pattern
resolver, environment discovery and the encryption lifecycle.
"""

from dataclasses import dataclass
from enum import Enum


class RepositoryStatus(str, Enum):
    """Encryption setup state of a repository.

    Derived from the filesystem on every query, never stored.
    """

    EMPTY = "empty"
    LOCKED = "locked"
    READY = "ready"


class StepId(str, Enum):
    """Provisioning steps in the order they must be applied."""

    KEY_MATERIAL = "keyMaterial"
    ATTRIBUTE_FILTER = "attributeFilter"
    IGNORE_LIST = "ignoreList"


@dataclass(frozen=True, slots=True)
class Environment:
    """A discovered environment file.

    Attributes:
        name: The environment name recovered from the file path.
        file: Absolute path of the environment file.
        relative: Path of the file relative to the working directory.

    """

    name: str
    file: str
    relative: str
