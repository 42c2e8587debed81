"""Typer CLI entrypoint."""

from __future__ import annotations

import asyncio
import logging

import typer

from obsmacros.console.io import ConsoleIO, TyperConsole
from obsmacros.console.keyreader import KeyReader, PynputKeyReader
from obsmacros.console.states import Session, connect_with_retry, prompt_credentials, run_menu
from obsmacros.core.errors import ConfigNotFoundError, ConfigParseError, ObsMacrosError
from obsmacros.core.settings import Settings
from obsmacros.core.store import Config, ConfigStore
from obsmacros.remote.base import RemoteSurface
from obsmacros.remote.obs_websocket import ObsWebSocketClient

app = typer.Typer(help="Bind keys to OBS Studio actions", add_completion=False)
LOGGER = logging.getLogger(__name__)


def _configure_logging(settings: Settings) -> None:
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _build_remote(settings: Settings) -> RemoteSurface:
    return ObsWebSocketClient(request_timeout_s=settings.request_timeout_s)


def _build_key_reader() -> KeyReader:
    return PynputKeyReader()


def _build_console() -> ConsoleIO:
    return TyperConsole()


def load_or_setup(store: ConfigStore, io: ConsoleIO) -> Config:
    """Load the config file, falling back to interactive credential entry."""
    io.echo("Loading config...")
    try:
        loaded = store.load()
    except ConfigNotFoundError:
        io.echo("Config not found")
    except ConfigParseError as exc:
        LOGGER.info("Ignoring unreadable config: %s", exc)
        io.echo("Config not found")
    else:
        io.echo("OK")
        return loaded.config

    config = Config()
    config.credentials = prompt_credentials(io, config.credentials)
    return config


async def _run_session(session: Session) -> None:
    try:
        await connect_with_retry(session)
        await run_menu(session)
    finally:
        await session.remote.disconnect()


@app.command()
def main() -> None:
    """Run the interactive macro console."""
    settings = Settings.load()
    _configure_logging(settings)
    io = _build_console()
    store = ConfigStore(settings.config_path)
    try:
        config = load_or_setup(store, io)
        session = Session(
            config=config,
            store=store,
            remote=_build_remote(settings),
            keys=_build_key_reader(),
            io=io,
        )
        asyncio.run(_run_session(session))
    except ObsMacrosError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


def run() -> None:
    app()


if __name__ == "__main__":
    run()
