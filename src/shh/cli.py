#!/usr/bin/env python
"""Command-line interface for shh.

This module provides the ``shh`` command group. Running ``shh`` without a
sub-command installs an environment; the sub-commands set up, unlock, lock
and inspect the repository encryption and manage environment files.
"""

import sys
from collections.abc import Generator
from contextlib import contextmanager

import click
from icecream import ic
from rich.markup import escape

from shh import __version__, console
from shh.config import ShhConfig, load_config, write_config
from shh.crypt import lifecycle
from shh.crypt.git_crypt import GitCrypt
from shh.environments import create_environment, find_environment, get_environments, install_environment
from shh.exceptions import BinaryNotFoundError, NotConfiguredError, ShhError
from shh.models import RepositoryStatus
from shh.prompts import prompt_encoded_key, prompt_environment_name, select_environment


@contextmanager
def handle_errors() -> Generator[None, None, None]:
    """Report shh errors on stderr and exit with status 1."""
    try:
        yield
    except ShhError as e:
        console.error(escape(str(e)))
        sys.exit(1)


def install(config: ShhConfig, environment_name: str | None) -> None:
    """Install an environment, unlocking the repository first when needed.

    Args:
        config: The resolved configuration.
        environment_name: Environment to install; prompted for when None.

    Raises:
        NotConfiguredError: If encryption is enabled but never set up.
        DiscoveryError: If the environment does not exist.

    """
    if config.encrypt:
        status = lifecycle.get_status(config)
        if status is RepositoryStatus.EMPTY:
            raise NotConfiguredError(status)
        if status is RepositoryStatus.LOCKED:
            console.info("Repository is locked. Unlocking.")
            lifecycle.unlock(config, config.encoded_key or prompt_encoded_key())

    selected = environment_name or select_environment(get_environments(config))
    ic(selected)
    environment = find_environment(config, selected)

    console.action(f"Installing {console.highlight(environment.name)}")
    target = install_environment(environment, config)
    console.success(
        f"Installed {console.highlight(environment.relative)} "
        f"({'copy' if config.copy else 'symlink'}) at {console.highlight(config.target)}"
    )
    ic(target)


@click.group(
    invoke_without_command=True,
    help="Manage per-environment secret files, encrypted at rest with git-crypt",
)
@click.option("--version", "-v", required=False, is_flag=True, help="print version")
@click.option("--debug", required=False, is_flag=True, help="print debug information")
@click.option("--quiet", "-q", required=False, is_flag=True, help="only print errors")
@click.option(
    "--cwd",
    required=False,
    type=click.Path(exists=True, file_okay=False),
    help="project root (defaults to the current directory)",
)
@click.option("--environments", required=False, help="naming pattern of environment files, e.g. ./env/.env.[name]")
@click.option("--target", required=False, help="path the selected environment is installed to")
@click.option("--template", required=False, help="template used for new environments")
@click.option("--copy/--symlink", default=None, help="copy the environment file instead of symlinking it")
@click.option("--encrypt/--no-encrypt", default=None, help="encrypt environment files with git-crypt")
@click.option("--encoded-key", "-k", required=False, envvar="SHH_KEY", help="base64 encoded git-crypt key")
@click.option("--environment", "-e", required=False, help="environment to install")
@click.pass_context
def cli(
    ctx: click.Context,
    version: bool,
    debug: bool,
    quiet: bool,
    cwd: str | None,
    environments: str | None,
    target: str | None,
    template: str | None,
    copy: bool | None,
    encrypt: bool | None,
    encoded_key: str | None,
    environment: str | None,
) -> None:
    """Resolve the configuration and install an environment when no sub-command is given.

    Args:
        ctx: The click context; receives the resolved configuration.
        version: Print version and exit.
        debug: Enable debug output.
        quiet: Suppress non-error output.
        cwd: Project root.
        environments: Naming pattern of environment files.
        target: Install target path.
        template: Template for new environments.
        copy: Copy instead of symlink.
        encrypt: Encrypt environment files.
        encoded_key: Base64 encoded git-crypt key.
        environment: Environment to install.

    """
    if not debug:
        ic.disable()

    if version:
        click.echo(__version__)
        ctx.exit()

    console.set_quiet(quiet)

    with handle_errors():
        ctx.obj = load_config(
            cwd,
            encoded_key=encoded_key,
            environments=environments,
            target=target,
            template=template,
            copy=copy,
            encrypt=encrypt,
        )
    ic(ctx.obj)

    if ctx.invoked_subcommand is None:
        with handle_errors():
            install(ctx.obj, environment)


@cli.command("install", help="Install an environment file at the target path")
@click.option("--environment", "-e", required=False, help="environment to install")
@click.pass_obj
def install_command(config: ShhConfig, environment: str | None) -> None:
    with handle_errors():
        install(config, environment)


@cli.command(help="Write the config file and set up git-crypt for environment files")
@click.pass_obj
def init(config: ShhConfig) -> None:
    with handle_errors():
        status = lifecycle.ensure_status(config, lifecycle.INIT_PRECONDITIONS)
        if status is RepositoryStatus.READY:
            console.info("Repository already configured, checking the setup again")

        path = write_config(config)
        console.step(f"Wrote {console.highlight(path.name)}")

        if config.encrypt and not GitCrypt.is_available():
            raise BinaryNotFoundError("git-crypt not installed. See https://github.com/AGWA/git-crypt")
        lifecycle.configure(config)

    console.newline()
    console.summary_panel(
        "Repository Configured",
        {
            "Environments": config.environments,
            "Target": config.target,
            "Mode": "copy" if config.copy else "symlink",
            "Encryption": "git-crypt" if config.encrypt else "disabled",
        },
    )


@cli.command("new", help="Create a new environment file from the template")
@click.option("--environment", "-e", required=False, help="name of the new environment")
@click.pass_obj
def new_environment(config: ShhConfig, environment: str | None) -> None:
    with handle_errors():
        name = environment or prompt_environment_name(config)
        path = create_environment(name, config)
    console.success(f"Created environment {console.highlight(name)} at {console.highlight(str(path))}")


@cli.command("list", help="List discovered environments")
@click.pass_obj
def list_environments(config: ShhConfig) -> None:
    with handle_errors():
        environments = get_environments(config, allow_empty=True)

    if not environments:
        console.warning(f"No environment found at {console.highlight(config.environments)}")
        return

    console.environments_table(environments)


@cli.command(help="Show the repository encryption status")
@click.pass_obj
def status(config: ShhConfig) -> None:
    with handle_errors():
        current = lifecycle.get_status(config)
    console.info(f"Repository status: {console.status_badge(current)}")


@cli.command(help="Unlock the repository with a base64 encoded key")
@click.option("--encoded-key", "-k", required=False, help="base64 encoded git-crypt key")
@click.pass_obj
def unlock(config: ShhConfig, encoded_key: str | None) -> None:
    with handle_errors():
        lifecycle.ensure_status(config, lifecycle.UNLOCK_PRECONDITIONS)
        lifecycle.unlock(config, encoded_key or config.encoded_key or prompt_encoded_key())
    console.success("Repository unlocked")


@cli.command(help="Lock the repository")
@click.pass_obj
def lock(config: ShhConfig) -> None:
    with handle_errors():
        lifecycle.ensure_status(config, lifecycle.LOCK_PRECONDITIONS)
        lifecycle.lock(config)
    console.success("Repository locked")


@cli.command("export-key", help="Print the base64 encoded git-crypt key")
@click.pass_obj
def export_key(config: ShhConfig) -> None:
    with handle_errors():
        lifecycle.ensure_status(config, lifecycle.EXPORT_KEY_PRECONDITIONS)
        key = lifecycle.get_key(config)
    click.echo(key)


if __name__ == "__main__":
    cli()
