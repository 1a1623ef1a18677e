from pathlib import Path

import typer
from rich import print

from asl.constants import ASL_CONFIG_FILE_PATH
from asl.services.aws.exceptions import ASLException
from asl.sso.config_store import ConfigStore
from asl.sso.types import SessionConfig

app = typer.Typer()

ConfigFileOption = typer.Option(
    ASL_CONFIG_FILE_PATH,
    "--config-file",
    envvar="ASL_CONFIG_FILE",
    help="Where asl keeps the parameters used to log in to AWS SSO",
)


@app.command("set")
def set_config(
    account_id: str = typer.Option(  # noqa: B008
        ..., "--account-id", "-a", help="The AWS account that is assigned to the user"
    ),
    role_name: str = typer.Option(  # noqa: B008
        ..., "--role-name", "-r", help="The role name that is assigned to the user"
    ),
    start_url: str = typer.Option(  # noqa: B008
        ...,
        "--start-url",
        "-u",
        help="The URL of your organization's AWS SSO user portal",
    ),
    region: str = typer.Option(..., "--region", "-l", help="The region to use"),  # noqa: B008
    config_file: Path = ConfigFileOption,
):
    """Store the parameters used to log in to AWS SSO"""
    config = SessionConfig(
        account_id=account_id, role_name=role_name, start_url=start_url, region=region
    )
    path = ConfigStore(config_file).save(config)
    print(f"[green]Saved asl config to [bold]{path}[/]. Please run: asl sso login[/green]")


@app.command()
def show(config_file: Path = ConfigFileOption):
    """Print the stored AWS SSO parameters"""
    try:
        config = ConfigStore(config_file).load()
    except ASLException as e:
        print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    print(f"account id: {config.account_id}")
    print(f"role name:  {config.role_name}")
    print(f"start url:  {config.start_url}")
    print(f"region:     {config.region}")
