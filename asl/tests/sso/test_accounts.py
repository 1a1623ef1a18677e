import pytest

from asl.services.aws.exceptions import (
    GetCredentialsError,
    ListAccountsError,
    ListRolesError,
    NoCredentialsFound,
    SSOClientError,
)
from asl.sso.accounts import get_credentials, list_accounts
from asl.sso.types import Account, CachedToken
from asl.tests.conftest import EXPIRATION_10AM, EXPIRATION_NOON, START_URL

TOKEN = CachedToken(
    start_url=START_URL,
    region="us-east-2",
    access_token="TOKEN",
    expires_at="2021-03-01T10:00:00Z",
)

ACCOUNTS = [
    {"accountId": "111111111111", "accountName": "My Team", "emailAddress": "team@testing.com"},
    {"accountId": "222222222222", "accountName": "Empty", "emailAddress": "empty@testing.com"},
    {"accountId": "333333333333", "accountName": "Shared Services", "emailAddress": "ss@testing.com"},
]
ROLES = {
    "111111111111": ["Admin", "ReadOnly"],
    "333333333333": ["DevSSOLogin"],
}


def test_list_accounts__preserves_order_and_keeps_accounts_without_roles(fake_client):
    client = fake_client(accounts=ACCOUNTS, roles=ROLES)

    accounts = list_accounts(client, TOKEN)

    assert [a.id for a in accounts] == ["111111111111", "222222222222", "333333333333"]
    assert [a.roles for a in accounts] == [["Admin", "ReadOnly"], [], ["DevSSOLogin"]]
    assert accounts[0].name == "My Team"
    assert accounts[0].email == "team@testing.com"
    assert client.calls_to("list_accounts") == [("list_accounts", "TOKEN", "us-east-2")]
    assert [call[3] for call in client.calls_to("list_account_roles")] == [
        "111111111111",
        "222222222222",
        "333333333333",
    ]


def test_list_accounts__list_accounts_fails(fake_client):
    client = fake_client(fail={"list_accounts": SSOClientError("boom")})
    with pytest.raises(ListAccountsError, match="boom"):
        list_accounts(client, TOKEN)


def test_list_accounts__list_roles_fails(fake_client):
    client = fake_client(
        accounts=ACCOUNTS, roles=ROLES, fail={"list_account_roles": SSOClientError("denied")}
    )
    with pytest.raises(ListRolesError, match="denied"):
        list_accounts(client, TOKEN)
    assert len(client.calls_to("list_account_roles")) == 1


def test_get_credentials__names_and_fields(fake_client):
    client = fake_client(
        accounts=ACCOUNTS,
        roles=ROLES,
        expirations={("111111111111", "ReadOnly"): EXPIRATION_NOON},
    )

    credentials = get_credentials(client, TOKEN, list_accounts(client, TOKEN))

    assert [c.profile_name for c in credentials] == [
        "my-team",
        "my-team-read-only",
        "shared-services",
    ]
    first = credentials[0]
    assert first.account_name == "My Team"
    assert first.region == "us-east-2"
    assert first.access_key_id == "AKIA111111111111ADMIN"
    assert first.secret_access_key == "secret-111111111111Admin"
    assert first.session_token == "token-111111111111Admin"
    assert first.expiration == EXPIRATION_10AM
    assert credentials[1].expiration == EXPIRATION_NOON


@pytest.mark.parametrize(
    "accounts",
    [
        [],
        [Account(id="222222222222", name="Empty", email="empty@testing.com")],
    ],
)
def test_get_credentials__nothing_found(fake_client, accounts):
    with pytest.raises(NoCredentialsFound):
        get_credentials(fake_client(), TOKEN, accounts)


def test_get_credentials__failure_aborts_fan_out(fake_client):
    client = fake_client(
        accounts=ACCOUNTS,
        roles=ROLES,
        fail={"get_role_credentials": SSOClientError("throttled")},
    )
    accounts = list_accounts(client, TOKEN)

    with pytest.raises(GetCredentialsError, match="throttled"):
        get_credentials(client, TOKEN, accounts)
    assert len(client.calls_to("get_role_credentials")) == 1


def test_get_credentials__colliding_names_are_kept_and_logged(fake_client, caplog):
    accounts = [
        Account(id="111111111111", name="Team", roles=["Admin"]),
        Account(id="222222222222", name="team", roles=["Admin"]),
    ]

    credentials = get_credentials(fake_client(), TOKEN, accounts)

    assert [c.profile_name for c in credentials] == ["team", "team"]
    assert "overwrites" in caplog.text
