"""Idempotent provisioning steps.

Each step makes one part of a repository ready for encrypted environment
files and knows how to tell whether that part is already in place. Steps
are applied strictly in the order of :data:`STEPS`; a step's ``run`` only
appends what is missing, so a pass interrupted halfway is finished by
running it again.
"""

from collections.abc import Callable
from pathlib import Path
from typing import NamedTuple

from icecream import ic

from shh import console
from shh.config import ShhConfig
from shh.crypt.git_crypt import GitCrypt
from shh.crypt.keys import decode_key
from shh.models import StepId
from shh.patterns import to_git_pattern

GIT_ATTRIBUTES_FILE = ".gitattributes"
GIT_IGNORE_FILE = ".gitignore"

_FILTER_ATTRIBUTES = "filter=git-crypt diff=git-crypt"


class ProvisioningStep(NamedTuple):
    """A unit of repository setup.

    Attributes:
        name: Identifier of the step.
        description: Short text shown while the step runs.
        done: Predicate telling whether the step is already applied.
        run: Action applying the step; must tolerate partially applied state.

    """

    name: StepId
    description: str
    done: Callable[[ShhConfig], bool]
    run: Callable[[ShhConfig], None]


def _read_lines(path: Path) -> list[str]:
    if not path.exists():
        return []
    return path.read_text().splitlines()


def _missing_lines(path: Path, lines: list[str]) -> list[str]:
    existing = {line.strip() for line in _read_lines(path)}
    return [line for line in lines if line not in existing]


def _append_lines(path: Path, lines: list[str]) -> None:
    """Append the lines not yet present in a text file.

    Existing content is never rewritten or removed.

    Args:
        path: The text file, created when missing.
        lines: Lines that must end up in the file.

    """
    missing = _missing_lines(path, lines)
    ic(path, missing)
    if not missing:
        return

    content = path.read_text() if path.exists() else ""
    if content and not content.endswith("\n"):
        content += "\n"

    path.write_text(content + "\n".join(missing) + "\n")


def attributes_lines(config: ShhConfig) -> list[str]:
    """Lines binding environment files to the git-crypt filter."""
    return [f"{to_git_pattern(config.environments)} {_FILTER_ATTRIBUTES}"]


def ignore_lines(config: ShhConfig) -> list[str]:
    """Lines ignoring the install target and keeping encrypted files tracked."""
    lines = [to_git_pattern(config.target)]
    if config.encrypt:
        lines.append(f"!{to_git_pattern(config.environments)}")
    return lines


def _key_material_done(config: ShhConfig) -> bool:
    if not config.encrypt:
        return True
    git_crypt = GitCrypt(config.cwd)
    return git_crypt.key_path.exists() and git_crypt.export_path.exists()


def _key_material_run(config: ShhConfig) -> None:
    if not config.encrypt:
        return

    git_crypt = GitCrypt(config.cwd)

    if config.encoded_key:
        key = decode_key(config.encoded_key)
        with console.spinner("Installing supplied key..."):
            git_crypt.unlock_with_key(key)
    elif not git_crypt.key_path.exists():
        with console.spinner("Initializing git-crypt..."):
            git_crypt.init()

    git_crypt.export_key()


def _attribute_filter_done(config: ShhConfig) -> bool:
    if not config.encrypt:
        return True
    path = Path(config.cwd) / GIT_ATTRIBUTES_FILE
    return not _missing_lines(path, attributes_lines(config))


def _attribute_filter_run(config: ShhConfig) -> None:
    if not config.encrypt:
        return
    _append_lines(Path(config.cwd) / GIT_ATTRIBUTES_FILE, attributes_lines(config))


def _ignore_list_done(config: ShhConfig) -> bool:
    path = Path(config.cwd) / GIT_IGNORE_FILE
    return not _missing_lines(path, ignore_lines(config))


def _ignore_list_run(config: ShhConfig) -> None:
    _append_lines(Path(config.cwd) / GIT_IGNORE_FILE, ignore_lines(config))


KEY_MATERIAL = ProvisioningStep(
    name=StepId.KEY_MATERIAL,
    description="Generating key",
    done=_key_material_done,
    run=_key_material_run,
)

ATTRIBUTE_FILTER = ProvisioningStep(
    name=StepId.ATTRIBUTE_FILTER,
    description=f"Configuring {GIT_ATTRIBUTES_FILE}",
    done=_attribute_filter_done,
    run=_attribute_filter_run,
)

IGNORE_LIST = ProvisioningStep(
    name=StepId.IGNORE_LIST,
    description=f"Configuring {GIT_IGNORE_FILE}",
    done=_ignore_list_done,
    run=_ignore_list_run,
)

# Order matters: later steps assume the earlier ones succeeded.
STEPS: tuple[ProvisioningStep, ...] = (KEY_MATERIAL, ATTRIBUTE_FILTER, IGNORE_LIST)


def apply_steps(config: ShhConfig, steps: tuple[ProvisioningStep, ...] = STEPS) -> list[StepId]:
    """Apply provisioning steps in order, skipping the ones already done.

    A failing step aborts the pass and leaves the earlier steps applied.

    Args:
        config: The resolved configuration.
        steps: The steps to apply.

    Returns:
        Identifiers of the steps that actually ran.

    """
    applied: list[StepId] = []

    for step in steps:
        if step.done(config):
            console.step(f"{step.description}: [muted]already done[/muted]")
            continue

        console.step(step.description)
        step.run(config)
        applied.append(step.name)

    ic(applied)
    return applied
