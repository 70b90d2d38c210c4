"""Command line interface for forgejo-mcp."""

import asyncio
import logging
import sys
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import VALID_LOG_LEVELS, ServerConfig, load_config
from .exceptions import ConfigurationError
from .remote import ALLOWED_DIALECTS, Dialect, VersionInfo, VersionProbe, detect_dialect

logger = logging.getLogger(__name__)

# stdout carries JSON-RPC frames while serving
console = Console()
error_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Configure stderr logging at the given level name."""
    logging.basicConfig(
        stream=sys.stderr,
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s:%(name)s:%(message)s",
    )
    if level != "debug":
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)


def _load_or_exit(**overrides) -> ServerConfig:
    try:
        return load_config(**overrides)
    except ConfigurationError as e:
        error_console.print(f"❌ Configuration error: {e}", style="red", markup=False)
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="forgejo-mcp")
@click.pass_context
def cli(ctx):
    """MCP server for Forgejo and Gitea repositories.

    \b
    Runs the stdio server when no command is given.

    \b
    CONFIGURATION (environment):
      FORGEJO_REMOTE_URL   Base URL of the instance (required)
      FORGEJO_AUTH_TOKEN   API token (required)
      FORGEJO_CLIENT_TYPE  gitea, forgejo or auto (default: auto)
      FORGEJO_COMPAT_MODE  Verbose response text (default: false)
      FORGEJO_DEBUG        Enable diagnostic tools (default: false)
      FORGEJO_LOG_LEVEL    debug, info, warning or error (default: info)
      FORGEJO_TIMEOUT      HTTP timeout in seconds (default: 30)
    """
    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.option(
    "--compat/--no-compat",
    default=None,
    help="Emit verbose per-item response text (overrides FORGEJO_COMPAT_MODE)",
)
@click.option("--debug", is_flag=True, help="Enable diagnostic tools")
@click.option(
    "--client-type",
    type=click.Choice(ALLOWED_DIALECTS, case_sensitive=False),
    help="Backend dialect (overrides FORGEJO_CLIENT_TYPE)",
)
@click.option(
    "--log-level",
    type=click.Choice(VALID_LOG_LEVELS, case_sensitive=False),
    help="Logging level (overrides FORGEJO_LOG_LEVEL)",
)
def serve(
    compat: Optional[bool] = None,
    debug: bool = False,
    client_type: Optional[str] = None,
    log_level: Optional[str] = None,
):
    """Run the MCP server on stdio."""
    from .server import McpServer

    config = _load_or_exit(
        compat_mode=compat,
        debug=True if debug else None,
        client_type=client_type,
        log_level=log_level,
    )
    configure_logging(config.log_level)
    logger.debug(f"Configuration: {config.to_display_dict()}")

    asyncio.run(McpServer(config).run())


async def _detect_backend(config: ServerConfig):
    """Detect the dialect, returning it with the probed version if any."""
    probe = VersionProbe(config.remote_url, config.auth_token, config.timeout)
    seen = {}

    async def probe_once() -> VersionInfo:
        info = await probe()
        seen["version"] = info.version
        return info

    dialect = await detect_dialect(config.client_type, probe_once)
    return dialect, seen.get("version")


@cli.command("config")
@click.option("--no-probe", is_flag=True, help="Do not contact the backend")
def show_config(no_probe: bool):
    """Validate configuration and show the detected backend."""
    config = _load_or_exit()
    configure_logging(config.log_level)

    table = Table(title="forgejo-mcp configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for key, value in config.to_display_dict().items():
        table.add_row(key, str(value))

    if no_probe:
        table.add_row("dialect", "not probed")
    elif config.client_type is not Dialect.AUTO:
        table.add_row("dialect", f"{config.client_type.value} (configured)")
    else:
        dialect, version = asyncio.run(_detect_backend(config))
        if version is None:
            table.add_row("dialect", f"{dialect.value} (fallback, probe failed)")
        else:
            table.add_row("dialect", f"{dialect.value} (detected)")
            table.add_row("server version", version)

    console.print(table)


def main():
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        error_console.print("\nInterrupted by user", style="red")
        sys.exit(1)
    except Exception as e:
        error_console.print(f"❌ Unexpected error: {str(e)}", style="red", markup=False)
        sys.exit(1)
