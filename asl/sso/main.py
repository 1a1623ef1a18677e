from pathlib import Path

import typer
from rich.console import Console

from asl.constants import DEFAULT_RUN_TIMEOUT_SECONDS, GLOBAL_RICH_CONSOLE_THEME
from asl.services.aws.clients_service import SSOClient
from asl.services.aws.constants import AWS_CONFIG_FILE, AWS_DIR_PATH, AWS_SSO_CACHE_DIR_PATH
from asl.services.aws.exceptions import ASLException
from asl.sso.config_store import ConfigStore
from asl.sso.constants import OutputFormats
from asl.sso.credentials import generate_credentials_file
from asl.sso.manage_config import ConfigFileOption
from asl.sso.manage_config import app as config_app

app = typer.Typer()

app.add_typer(config_app, name="config", help="Manage your asl configuration")

console = Console(theme=GLOBAL_RICH_CONSOLE_THEME)

SUCCESS_MESSAGE = """it worked! \\o/

[bold]SSO[/]
   your new access key pairs have been stored in the aws credentials file {credentials_file}
   profiles: {profiles}
   to use these credentials, set AWS_PROFILE or call the aws cli with the --profile option.
   note that they will expire at {expires_at}
   [subtle]after this time, you may safely rerun asl sso login to refresh your credentials[/]
"""


@app.command()
def login(
    backup: bool = typer.Option(  # noqa: B008
        False,
        "--backup",
        "-b",
        help="Back up the aws config and credentials files before changing them",
    ),
    force_login: bool = typer.Option(  # noqa: B008
        False, "--login", "-l", help="Force a login to renew the SSO access token"
    ),
    output_format: OutputFormats = OutputFormats.JSON.value,  # type: ignore[assignment]
    timeout: float = typer.Option(  # noqa: B008
        DEFAULT_RUN_TIMEOUT_SECONDS,
        "--timeout",
        help="Give up when the whole run takes longer than this many seconds",
    ),
    aws_dir: Path = typer.Option(  # noqa: B008
        AWS_DIR_PATH,
        "--aws-dir",
        envvar="ASL_AWS_DIR",
        help="Where the aws config and credentials files live",
    ),
    sso_cache_dir: Path = typer.Option(  # noqa: B008
        AWS_SSO_CACHE_DIR_PATH,
        "--sso-cache-dir",
        envvar="ASL_SSO_CACHE_DIR",
        help="Where aws sso login caches its access token",
    ),
    config_file: Path = ConfigFileOption,
):
    """Get credentials for every account and role you can access with AWS SSO and store them in the aws
    credentials file
    """
    try:
        config = ConfigStore(config_file).load()
        result = generate_credentials_file(
            config=config,
            client=SSOClient(aws_config_file=aws_dir / AWS_CONFIG_FILE),
            aws_dir=aws_dir,
            sso_cache_dir=sso_cache_dir,
            backup=backup,
            force_login=force_login,
            output=output_format,
            timeout=timeout,
        )
    except ASLException as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    console.print(
        SUCCESS_MESSAGE.format(
            credentials_file=result.credentials.store_location,
            profiles=", ".join(result.profiles),
            expires_at=result.credentials.latest_expiry,
        )
    )
