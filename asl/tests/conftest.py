import configparser
import json
from pathlib import PosixPath
from typing import Callable, Optional

import pytest

from asl.services.aws.clients_service import SSOControlPlane
from asl.services.aws.exceptions import SSOClientError
from asl.services.aws.token_cache import cache_file_name
from asl.sso.types import SessionConfig

START_URL = "https://dev_tools.awsapps.com/start"
REGION = "us-east-2"

# 2021-03-01T10:00:00Z and 2021-03-01T12:00:00Z in epoch milliseconds
EXPIRATION_10AM = 1614592800000
EXPIRATION_NOON = 1614600000000


def role_credentials(name: str, expiration: int = EXPIRATION_10AM):
    return {
        "accessKeyId": f"AKIA{name.upper()}",
        "secretAccessKey": f"secret-{name}",
        "sessionToken": f"token-{name}",
        "expiration": expiration,
    }


def config_to_dict(file):
    config = configparser.RawConfigParser()
    config.read(file)
    return {name: dict(config[name]) for name in config.sections()}


class FakeSSOClient(SSOControlPlane):
    """Serves accounts and roles from dicts and records every call made to it"""

    def __init__(
        self,
        accounts: Optional[list[dict]] = None,
        roles: Optional[dict[str, list[str]]] = None,
        expirations: Optional[dict[tuple[str, str], int]] = None,
        on_login: Optional[Callable[[], None]] = None,
        fail: Optional[dict[str, Exception]] = None,
    ):
        self.accounts = accounts or []
        self.roles = roles or {}
        self.expirations = expirations or {}
        self.on_login = on_login
        self.fail = fail or {}
        self.calls: list[tuple] = []
        self.login_timeouts: list[Optional[float]] = []

    def _maybe_fail(self, operation, *args):
        self.calls.append((operation, *args))
        error = self.fail.get(operation)
        if error:
            raise error

    def login(self, role_name, timeout=None):
        self.login_timeouts.append(timeout)
        self._maybe_fail("login", role_name)
        if self.on_login:
            self.on_login()

    def list_accounts(self, access_token, region):
        self._maybe_fail("list_accounts", access_token, region)
        return self.accounts

    def list_account_roles(self, access_token, region, account_id):
        self._maybe_fail("list_account_roles", access_token, region, account_id)
        return [
            {"roleName": role, "accountId": account_id}
            for role in self.roles.get(account_id, [])
        ]

    def get_role_credentials(self, access_token, region, account_id, role_name):
        self._maybe_fail("get_role_credentials", access_token, region, account_id, role_name)
        return role_credentials(
            f"{account_id}{role_name}",
            self.expirations.get((account_id, role_name), EXPIRATION_10AM),
        )

    def calls_to(self, operation):
        return [call for call in self.calls if call[0] == operation]


@pytest.fixture
def aws_dir(tmp_path) -> PosixPath:
    path = tmp_path / ".aws"
    path.mkdir()
    return path


@pytest.fixture
def session_config() -> SessionConfig:
    return SessionConfig(
        account_id="123456789012",
        role_name="Developer",
        start_url=START_URL,
        region=REGION,
    )


@pytest.fixture
def sso_cache_dir(tmp_path) -> PosixPath:
    return tmp_path / "sso-cache"


@pytest.fixture
def write_cache(sso_cache_dir):
    def _write_cache(expires_at: str, access_token: str = "TOKEN", start_url: str = START_URL):
        sso_cache_dir.mkdir(parents=True, exist_ok=True)
        path = sso_cache_dir / cache_file_name(start_url)
        path.write_text(
            json.dumps(
                {
                    "startUrl": start_url,
                    "region": REGION,
                    "accessToken": access_token,
                    "expiresAt": expires_at,
                }
            )
        )
        return path

    return _write_cache


@pytest.fixture
def fake_client() -> Callable[..., FakeSSOClient]:
    return FakeSSOClient


@pytest.fixture
def login_error():
    return SSOClientError("`aws sso login --profile Developer` failed with exit code 255")
