import logging

from pydantic import ValidationError

from asl.services.aws.clients_service import SSOControlPlane
from asl.services.aws.exceptions import (
    GetCredentialsError,
    ListAccountsError,
    ListRolesError,
    NoCredentialsFound,
    SSOClientError,
)
from asl.sso.types import Account, CachedToken, Credential
from asl.sso.utils import resolve_profile_name


def list_accounts(client: SSOControlPlane, token: CachedToken) -> list[Account]:
    """Every account visible to the token, each with its roles, in the order AWS returns them"""
    try:
        account_infos = client.list_accounts(token.access_token, token.region)
    except SSOClientError as e:
        raise ListAccountsError(str(e)) from e
    logging.debug(f"{len(account_infos)} accounts obtained with the sso token")

    accounts = []
    for info in account_infos:
        account_id = info.get("accountId")
        try:
            roles = client.list_account_roles(token.access_token, token.region, account_id)
            role_names = [role["roleName"] for role in roles]
        except SSOClientError as e:
            raise ListRolesError(str(e)) from e
        except KeyError as e:
            raise ListRolesError(f"Malformed role list for account {account_id}: {e}") from e
        logging.debug(f"Roles for account {account_id}: {role_names}")
        try:
            accounts.append(Account.model_validate({**info, "roles": role_names}))
        except ValidationError as e:
            raise ListAccountsError(f"Malformed account {info}: {e}") from e
    return accounts


def get_credentials(
    client: SSOControlPlane, token: CachedToken, accounts: list[Account]
) -> list[Credential]:
    credentials: list[Credential] = []
    seen: dict[str, str] = {}
    for account in accounts:
        for i, role_name in enumerate(account.roles):
            try:
                role_credentials = client.get_role_credentials(
                    token.access_token, token.region, account.id, role_name
                )
                credential = Credential.model_validate(
                    {
                        **role_credentials,
                        "profile_name": resolve_profile_name(account.name, i, role_name),
                        "account_name": account.name,
                        "region": token.region,
                    }
                )
            except SSOClientError as e:
                raise GetCredentialsError(str(e)) from e
            except ValidationError as e:
                raise GetCredentialsError(
                    f"Malformed credentials for {role_name} in {account.id}: {e}"
                ) from e

            if credential.profile_name in seen:
                logging.warning(
                    f"Profile {credential.profile_name} for {role_name} in {account.name}"
                    + f" overwrites the one generated for {seen[credential.profile_name]}"
                )
            seen[credential.profile_name] = f"{role_name} in {account.name}"
            logging.info(
                f"Credentials profile {credential.profile_name}"
                + f" (account: {account.name}, region: {token.region})"
            )
            credentials.append(credential)

    logging.debug(f"{len(credentials)} credentials have been generated")
    if not credentials:
        raise NoCredentialsFound("No credentials were found for any account or role")
    return credentials
