"""CLI entry point."""

from __future__ import annotations

import sys

import rich_click as click
import yaml

from arbor.compose import build_container
from arbor.config import ConfigManager, ProfileLoader
from arbor.core.errors import RepositoryError
from arbor.core.logging_config import configure_logging

# Configure rich-click styling
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.USE_MARKDOWN = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = "Try running '--help' for more information."
click.rich_click.ERRORS_EPILOGUE = ""
click.rich_click.MAX_WIDTH = 100

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


# =========================================================================
# Root CLI
# =========================================================================
@click.group()
@click.version_option(package_name="arbor")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    envvar="ARBOR_CONFIG_DIR",
    default=None,
    help="Config directory (default: ~/.arbor)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level (default: ARBOR_LOG_LEVEL or WARNING)",
)
@click.pass_context
def cli(ctx: click.Context, config_dir: str | None, log_level: str | None) -> None:
    """Arbor - a shell for hierarchical content repositories.

    Navigate a tree of nodes and properties with filesystem-style commands:
    `cd`, `ls`, `mkdir`, `mv`, `cp`, `rm`, glob search and tab completion.

    **Commands:**

        arbor shell      Open the interactive shell

        arbor profile    List and show connection profiles

        arbor config     Create the config directory
    """
    # Loads <config-dir>/.env before logging reads ARBOR_LOG_*
    config_manager = ConfigManager(config_dir)
    configure_logging(level=log_level, force=log_level is not None)
    ctx.obj = config_manager


# =========================================================================
# Shell
# =========================================================================
@cli.command()
@click.option("--profile", "-p", "profile_name", default=None, help="Saved profile to use")
@click.option("--transport", "-t", default=None, help="Transport name (memory, fs)")
@click.option("--path", default=None, help="Repository file for the fs transport")
@click.option("--workspace", "-w", default=None, help="Workspace to log into")
@click.option("--user", "-u", default=None, help="User name")
@click.option("--password", default=None, help="Password")
@click.option("--command", "-c", default=None, help="Run one command and exit")
@click.option("--save-profile", default=None, help="Save the effective settings as a profile")
@click.pass_obj
def shell(
    config_manager: ConfigManager,
    profile_name: str | None,
    transport: str | None,
    path: str | None,
    workspace: str | None,
    user: str | None,
    password: str | None,
    command: str | None,
    save_profile: str | None,
) -> None:
    """Open the interactive shell.

    Settings come from the named profile (or the in-memory default) with
    command-line options applied on top.

    **Examples:**

        arbor shell

        arbor shell --transport fs --path ./content.json

        arbor shell --profile staging --workspace drafts

        arbor shell -p staging -c "ls -l /content"
    """
    from arbor.frontends.cli.shell import run_command, run_shell

    overrides = {
        "transport": {"name": transport, "path": path},
        "session": {"workspace": workspace, "username": user, "password": password},
    }

    try:
        container = build_container(
            profile=profile_name, config_dir=config_manager.config_dir, overrides=overrides
        )
        if save_profile and container.profile is not None:
            container.profile.name = save_profile
            saved = ProfileLoader(config_manager).save(container.profile)
            click.echo(f"Saved profile '{save_profile}' to {saved}")
        # Open the session now so connection problems end the command here
        if not container.session.is_live():
            raise click.ClickException("Session is not live")
    except (RepositoryError, ValueError) as e:
        raise click.ClickException(str(e)) from e

    if command is not None:
        sys.exit(run_command(container, command))
    sys.exit(run_shell(container))


# =========================================================================
# Profiles
# =========================================================================
@cli.group()
def profile() -> None:
    """Manage connection profiles.

    Profiles are YAML files in `<config-dir>/profiles/` holding transport
    and session settings.

    **Commands:**

        arbor profile list     List saved profiles

        arbor profile show     Print a profile
    """
    pass


@profile.command("list")
@click.pass_obj
def profile_list(config_manager: ConfigManager) -> None:
    """List saved profiles."""
    names = ProfileLoader(config_manager).list_profiles()
    if not names:
        click.echo("No profiles found")
        return
    for name in names:
        click.echo(name)


@profile.command("show")
@click.argument("name")
@click.pass_obj
def profile_show(config_manager: ConfigManager, name: str) -> None:
    """Print a saved profile (password masked).

    **Examples:**

        arbor profile show staging
    """
    try:
        loaded = ProfileLoader(config_manager).load(name)
    except RepositoryError as e:
        raise click.ClickException(str(e)) from e

    data = loaded.to_dict()
    if data.get("session", {}).get("password"):
        data["session"]["password"] = "****"
    click.echo(yaml.safe_dump(data, default_flow_style=False).rstrip())


# =========================================================================
# Config
# =========================================================================
@cli.group()
def config() -> None:
    """Manage the config directory."""
    pass


@config.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite existing files")
@click.pass_obj
def config_init(config_manager: ConfigManager, force: bool) -> None:
    """Write the default config files.

    Creates `arbor.yml`, `aliases.yml` and the `profiles/` directory.
    Existing files are kept unless --force is given.
    """
    try:
        written = config_manager.init_config(force=force)
    except OSError as e:
        raise click.ClickException(str(e)) from e

    if not written:
        click.echo(f"Config already present in {config_manager.config_dir}")
        return
    for path in written:
        click.echo(f"Wrote {path}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
