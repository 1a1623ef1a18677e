import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from asl.services.aws.clients_service import DeadlineClient, SSOControlPlane
from asl.services.aws.config_service import AWSConfigService
from asl.services.aws.constants import AWS_DIR_PATH, AWS_SSO_CACHE_DIR_PATH
from asl.services.aws.token_cache import TokenCache
from asl.sso.accounts import get_credentials, list_accounts
from asl.sso.constants import OutputFormats
from asl.sso.session import SSOSession
from asl.sso.types import Credential, PersistenceResult, SessionConfig


class LoginResult(BaseModel):
    config: PersistenceResult
    credentials: PersistenceResult
    profiles: list[str]


def generate_credentials_file(
    config: SessionConfig,
    client: SSOControlPlane,
    aws_dir: Path = AWS_DIR_PATH,
    sso_cache_dir: Path = AWS_SSO_CACHE_DIR_PATH,
    backup: bool = False,
    force_login: bool = False,
    output: OutputFormats = OutputFormats.JSON,
    timeout: Optional[float] = None,
) -> LoginResult:
    """Log in if needed, collect credentials for every account and role and write
    them to the aws credentials file.

    The credential store is only touched once every credential is in hand, so a
    failure or timeout part way through the fan-out leaves it as it was.
    """
    if timeout is not None:
        client = DeadlineClient(client, timeout=timeout)
    aws_config = AWSConfigService(aws_dir=aws_dir, backup=backup)

    config_result = aws_config.persist_session_profile(config, output=output)

    session = SSOSession(config=config, client=client, cache=TokenCache(sso_cache_dir))
    token = session.obtain_session(force_login=force_login)

    accounts = list_accounts(client, token)
    credentials: list[Credential] = get_credentials(client, token, accounts)

    credentials_result = aws_config.persist_credentials(credentials, output=output)
    logging.debug(f"Credentials expire at {credentials_result.latest_expiry}")
    return LoginResult(
        config=config_result,
        credentials=credentials_result,
        # colliding profile names were written to a single section
        profiles=list(dict.fromkeys(credential.profile_name for credential in credentials)),
    )
