"""entrykit: command-line entry point (composition root).

Wires together: logging → boot config → Bootstrapper → entries.
The only fatal condition is a configuration error, which exits with
status 2; unreachable providers only leave gaps in the stores.

Examples
    $ entrykit --boot boot.yaml
    $ entrykit --set "cred[0].endpoint=kv.internal:2379" --timeout 5
"""

from __future__ import annotations

import logging as _logging
from pathlib import Path

import click

from entrykit import __version__
from entrykit.core.bootstrapper import Bootstrapper
from entrykit.core.context import BootContext
from entrykit.core.errors import ConfigParseError
from entrykit.log_config.logger import setup_logging
from entrykit.providers.base import DEFAULT_TIMEOUT

_log = _logging.getLogger(__name__)

EXIT_CONFIG_ERROR = 2


@click.command(help="Resolve boot configuration and fetch credentials and certificates.")
@click.version_option(__version__, prog_name="entrykit")
@click.option(
    "--boot",
    "boot_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Boot file (default: $ENTRYKIT_BOOT_FILE, then ./boot.yaml).",
)
@click.option(
    "--set",
    "overrides",
    multiple=True,
    metavar="KEY=VALUE",
    help="Flat override such as 'cred[0].endpoint=kv:2379'. Repeatable.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="INFO",
    envvar="ENTRYKIT_LOG_LEVEL",
    show_default=True,
    show_envvar=True,
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Also write a rotating entrykit.log here.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT,
    show_default=True,
    help="Per-request provider timeout in seconds.",
)
@click.option(
    "--deadline",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Overall bootstrap deadline in seconds (unbounded by default).",
)
def main(
    boot_path: Path | None,
    overrides: tuple[str, ...],
    log_level: str,
    log_dir: Path | None,
    timeout: float,
    deadline: float | None,
) -> None:
    """Load, bootstrap, print the safe summary and interrupt."""
    setup_logging(log_level=log_level, log_dir=str(log_dir) if log_dir else None)
    _log.info("Starting entrykit %s", __version__)

    bootstrapper = Bootstrapper(timeout=timeout)
    try:
        bootstrapper.load(boot_path, flag_overrides=overrides)
        bootstrapper.register()
        ctx = BootContext.with_timeout(deadline) if deadline else BootContext.background()
        bootstrapper.bootstrap(ctx)
    except (ConfigParseError, FileNotFoundError) as exc:
        _log.error("Configuration error: %s", exc)
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(EXIT_CONFIG_ERROR) from exc

    click.echo(bootstrapper.describe())
    bootstrapper.interrupt(ctx)
    _log.info("entrykit stopped")


if __name__ == "__main__":
    main()
