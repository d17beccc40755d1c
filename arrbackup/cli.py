"""Main CLI entry point for arr-backup.

Retrieves a fresh manual backup from a Sonarr/Radarr style server into an
empty local directory. Settings come from an optional YAML file and
``ARR_*`` environment variables; see ``arr-backup --help``.
"""

from typing import Optional

import click

from arrbackup import __version__
from arrbackup.utils.errors import ErrorHandler
from arrbackup.utils.logging import register_secret, setup_logging


def _load_settings(ctx: click.Context, **overrides):
    """Load settings and keep the API key out of the logs."""
    from arrbackup.config import ConfigManager

    settings = ConfigManager(config_file=ctx.obj["config_file"]).load_settings(overrides)
    register_secret(settings.api_key)
    return settings


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--log-file", help="Log to file in addition to console")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False),
    help="YAML settings file (default: $ARR_BACKUP_CONFIG)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, log_file: Optional[str], config_file: Optional[str]) -> None:
    """arr-backup - Fetch a fresh manual backup from a Sonarr/Radarr server.

    Reuses a recent manual backup or triggers a new one, extracts it into
    ARR_DEST_DIR and optionally deletes it from the server.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_file"] = config_file
    ctx.obj["error_handler"] = ErrorHandler(verbose=verbose)

    setup_logging(verbose=verbose, log_file=log_file)


@cli.command()
@click.option("--max-age", type=click.FloatRange(min=0, min_open=True), help="Reuse manual backups younger than SECONDS")
@click.option("--delete/--keep", "delete_backup", default=None, help="Delete the remote backup after extraction")
@click.pass_context
def run(ctx: click.Context, max_age: Optional[float], delete_backup: Optional[bool]) -> None:
    """Retrieve a backup into the destination directory."""
    try:
        from arrbackup.backup import BackupManager
        from arrbackup.client import ArrClient

        settings = _load_settings(ctx, max_age=max_age, delete_backup=delete_backup)

        with ArrClient(settings.base_url, settings.api_key, timeout=settings.request_timeout) as client:
            result = BackupManager(settings, client=client).run()

        backup = result["backup"]
        click.echo(f"✓ Extracted backup {backup.name} ({len(result['files'])} files) into {settings.dest_dir}")
        if result["deleted"]:
            click.echo(f"✓ Deleted backup {backup.id} from server")

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Backup retrieval")


@cli.command(name="list")
@click.pass_context
def list_backups(ctx: click.Context) -> None:
    """List backups known to the server, newest first."""
    try:
        from arrbackup.client import ArrClient

        settings = _load_settings(ctx)

        with ArrClient(settings.base_url, settings.api_key, timeout=settings.request_timeout) as client:
            backups = client.list_backups()

        if not backups:
            click.echo("No backups found")
            return

        for backup in sorted(backups, key=lambda b: (b.created_at, b.id), reverse=True):
            click.echo(
                f"{backup.id:>6}  {backup.type.value:<9}  "
                f"{backup.created_at.strftime('%Y-%m-%d %H:%M:%S')}  {backup.name}"
            )

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Backup listing")


@cli.command()
@click.pass_context
def check(ctx: click.Context) -> None:
    """Validate settings and directories without contacting the server."""
    try:
        from arrbackup.backup import BackupManager
        from arrbackup.client import ArrClient

        settings = _load_settings(ctx)

        with ArrClient(settings.base_url, settings.api_key, timeout=settings.request_timeout) as client:
            BackupManager(settings, client=client).pre_checks()

        click.echo("✓ Configuration is valid")
        click.echo(f"Server: {settings.base_url}")
        click.echo(f"Source: {settings.config_dir}")
        click.echo(f"Destination: {settings.dest_dir}")
        click.echo(f"Delete after copy: {'yes' if settings.delete_backup else 'no'}")

    except Exception as e:
        ctx.obj["error_handler"].exit_with_error(e, "Configuration check")


if __name__ == "__main__":
    cli()
