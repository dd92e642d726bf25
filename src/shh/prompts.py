"""Interactive user prompts.

Prompts are only used when a value was not given on the command line.
A cancelled prompt aborts the command.
"""

import questionary

from shh.config import ShhConfig
from shh.crypt.keys import validate_key
from shh.environments import validate_name
from shh.models import Environment
from shh.styles import POINTER, PROMPT_STYLE, QMARK


def select_environment(environments: list[Environment]) -> str:
    """Ask which environment to install.

    Args:
        environments: The discovered environments.

    Returns:
        The selected environment name.

    """
    return questionary.select(
        "Select the environment to install",
        choices=[environment.name for environment in environments],
        style=PROMPT_STYLE,
        pointer=POINTER,
        qmark=QMARK,
    ).unsafe_ask()


def prompt_environment_name(config: ShhConfig) -> str:
    """Ask for the name of a new environment, validating it on the fly."""
    return questionary.text(
        "Give the new environment a name",
        validate=lambda name: validate_name(name, config),
        style=PROMPT_STYLE,
        qmark=QMARK,
    ).unsafe_ask()


def prompt_encoded_key() -> str:
    """Ask for the base64 encoded key without echoing it."""
    return questionary.password(
        "Provide the base64 encoded key (see `shh export-key`)",
        validate=validate_key,
        style=PROMPT_STYLE,
        qmark=QMARK,
    ).unsafe_ask()

