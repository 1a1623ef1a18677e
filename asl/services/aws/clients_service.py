import logging
import os
from abc import ABC
from pathlib import Path
from subprocess import TimeoutExpired, run
from time import monotonic
from typing import Optional, Union

import boto3
from botocore.client import BaseClient
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from asl.services.aws.exceptions import RunTimeout, SSOClientError
from asl.sso.types import AccountInfoType, AccountRoleType, RoleCredentialsType

SSO_CLIENT_CONFIG = Config(retries={"total_max_attempts": 1, "mode": "standard"})


def transform_client_error(error: Union[ClientError, BotoCoreError], action: str):
    if isinstance(error, ClientError):
        code = error.response["Error"]["Code"]
        if code == "UnauthorizedException":
            return SSOClientError(
                f"The sso access token was rejected while trying to {action}."
                + " Please run asl sso login --login to refresh it"
            )
        if code == "TooManyRequestsException":
            return SSOClientError(f"AWS SSO throttled the request to {action}")
    return SSOClientError(f"Could not {action}: {error}")


class SSOControlPlane(ABC):
    """The four calls the credential flow needs from the identity provider"""

    def login(self, role_name: str, timeout: Optional[float] = None):
        raise NotImplementedError

    def list_accounts(self, access_token: str, region: str) -> list[AccountInfoType]:
        raise NotImplementedError

    def list_account_roles(
        self, access_token: str, region: str, account_id: str
    ) -> list[AccountRoleType]:
        raise NotImplementedError

    def get_role_credentials(
        self, access_token: str, region: str, account_id: str, role_name: str
    ) -> RoleCredentialsType:
        raise NotImplementedError


class SSOClient(SSOControlPlane):
    """Talks to the sso portal api with boto3 and delegates login to the aws cli,
    which owns the browser flow and the token cache.
    """

    def __init__(
        self,
        session: Optional[boto3.Session] = None,
        aws_config_file: Optional[Path] = None,
        aws_cli: str = "aws",
    ):
        self.session = session or boto3.Session()
        self.aws_config_file = aws_config_file
        self.aws_cli = aws_cli
        self._clients: dict[str, BaseClient] = {}

    def _client(self, region: str) -> BaseClient:
        if region not in self._clients:
            logging.debug(f"Creating new sso client for {region}")
            self._clients[region] = self.session.client(
                "sso", region_name=region, config=SSO_CLIENT_CONFIG
            )
        return self._clients[region]

    def login(self, role_name: str, timeout: Optional[float] = None):
        command = [self.aws_cli, "sso", "login", "--profile", role_name]
        env = None
        if self.aws_config_file:
            env = {**os.environ, "AWS_CONFIG_FILE": str(self.aws_config_file)}
        logging.debug(f"Running {' '.join(command)}")
        try:
            proc = run(command, env=env, timeout=timeout)
        except TimeoutExpired as e:
            raise RunTimeout(
                f"`{' '.join(command)}` did not finish within {timeout}s", timeout=timeout
            ) from e
        except OSError as e:
            raise SSOClientError(f"Error running `{' '.join(command)}`: {e}") from e
        if proc.returncode != 0:
            raise SSOClientError(
                f"`{' '.join(command)}` failed with exit code {proc.returncode}"
            )

    def list_accounts(self, access_token: str, region: str) -> list[AccountInfoType]:
        paginator = self._client(region).get_paginator("list_accounts")
        try:
            return [
                account
                for page in paginator.paginate(accessToken=access_token)
                for account in page["accountList"]
            ]
        except (ClientError, BotoCoreError) as e:
            raise transform_client_error(e, action="list accounts") from e

    def list_account_roles(
        self, access_token: str, region: str, account_id: str
    ) -> list[AccountRoleType]:
        paginator = self._client(region).get_paginator("list_account_roles")
        try:
            return [
                role
                for page in paginator.paginate(
                    accessToken=access_token, accountId=account_id
                )
                for role in page["roleList"]
            ]
        except (ClientError, BotoCoreError) as e:
            raise transform_client_error(
                e, action=f"list roles of account {account_id}"
            ) from e

    def get_role_credentials(
        self, access_token: str, region: str, account_id: str, role_name: str
    ) -> RoleCredentialsType:
        try:
            r = self._client(region).get_role_credentials(
                roleName=role_name,
                accountId=account_id,
                accessToken=access_token,
            )
        except (ClientError, BotoCoreError) as e:
            raise transform_client_error(
                e, action=f"get credentials for {role_name} in {account_id}"
            ) from e
        return r["roleCredentials"]


class DeadlineClient(SSOControlPlane):
    """Bounds a whole run: every call made after the timeout has elapsed raises RunTimeout"""

    def __init__(self, client: SSOControlPlane, timeout: float):
        self.client = client
        self.timeout = timeout
        self.started = monotonic()

    def _check(self, operation: str) -> float:
        """Returns the seconds left in the run"""
        elapsed = monotonic() - self.started
        if elapsed > self.timeout:
            raise RunTimeout(
                f"Gave up before {operation}: the run exceeded {self.timeout}s",
                timeout=self.timeout,
            )
        return self.timeout - elapsed

    def login(self, role_name: str, timeout: Optional[float] = None):
        remaining = self._check("login")
        if timeout is not None:
            remaining = min(remaining, timeout)
        return self.client.login(role_name, timeout=remaining)

    def list_accounts(self, access_token: str, region: str) -> list[AccountInfoType]:
        self._check("listing accounts")
        return self.client.list_accounts(access_token, region)

    def list_account_roles(
        self, access_token: str, region: str, account_id: str
    ) -> list[AccountRoleType]:
        self._check(f"listing roles of account {account_id}")
        return self.client.list_account_roles(access_token, region, account_id)

    def get_role_credentials(
        self, access_token: str, region: str, account_id: str, role_name: str
    ) -> RoleCredentialsType:
        self._check(f"getting credentials for {role_name} in {account_id}")
        return self.client.get_role_credentials(
            access_token, region, account_id, role_name
        )
