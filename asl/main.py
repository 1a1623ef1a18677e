import logging

import typer
from rich.logging import RichHandler

from asl import __version__
from asl.constants import DEFAULT_LOG_LEVEL, NOISY_LOGGERS, LogLevel
from asl.sso.main import app as sso

app = typer.Typer(help="Get credentials for all accounts for which you have permission in AWS SSO")
app.add_typer(sso, name="sso", help="Log in to AWS SSO and manage your asl configuration")


def configure_logging(level: LogLevel):
    logger = logging.getLogger()
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(show_path=False, rich_tracebacks=True))
    logger.setLevel(level.value.upper())
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@app.callback()
def main(
    loglevel: LogLevel = typer.Option(  # noqa: B008
        DEFAULT_LOG_LEVEL,
        "--loglevel",
        "-d",
        case_sensitive=False,
        help="Set the log level",
    ),
):
    configure_logging(loglevel)


@app.command()
def version():
    """Print the asl version"""
    print(__version__)
