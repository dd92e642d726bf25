"""Encryption subpackage.

This package contains the git-crypt wrapper, key encoding helpers, the
provisioning steps and the repository lifecycle built on top of them.
"""

from shh.crypt.git_crypt import GitCrypt, is_already_initialized
from shh.crypt.keys import decode_key, encode_key, validate_key
from shh.crypt.lifecycle import configure, ensure_status, get_key, get_status, lock, unlock
from shh.crypt.provisioning import STEPS, ProvisioningStep, apply_steps

__all__ = [
    # git_crypt
    "GitCrypt",
    "is_already_initialized",
    # keys
    "decode_key",
    "encode_key",
    "validate_key",
    # lifecycle
    "configure",
    "ensure_status",
    "get_key",
    "get_status",
    "lock",
    "unlock",
    # provisioning
    "STEPS",
    "ProvisioningStep",
    "apply_steps",
]
