from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TypedDict

from pydantic import BaseModel, ConfigDict, Field, field_validator

from asl.sso.utils import parse_expires_at


class AccountInfoType(TypedDict):
    accountId: str
    accountName: str
    emailAddress: str


class AccountRoleType(TypedDict):
    roleName: str
    accountId: str


class RoleCredentialsType(TypedDict):
    accessKeyId: str
    secretAccessKey: str
    sessionToken: str
    expiration: int


class SessionConfig(BaseModel):
    """Who is logging in, as stored in the asl config file"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    account_id: str = Field(alias="accountId")
    role_name: str = Field(alias="roleName")
    start_url: str = Field(alias="startUrl")
    region: str


class CachedToken(BaseModel):
    """The sso access token the aws cli caches after `aws sso login`"""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    start_url: str = Field(alias="startUrl")
    region: str
    access_token: str = Field(alias="accessToken")
    expires_at: datetime = Field(alias="expiresAt")

    @field_validator("expires_at", mode="before")
    @classmethod
    def parse_expiry(cls, value):
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            raise ValueError(f"expiresAt must be a string, got {value!r}")
        return parse_expires_at(value)

    @property
    def expired(self) -> bool:
        return datetime.now(tz=timezone.utc) >= self.expires_at


class Account(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="accountId")
    name: str = Field(alias="accountName")
    email: str = Field(default="", alias="emailAddress")
    roles: list[str] = []


class Credential(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    profile_name: str
    account_name: str
    region: str
    access_key_id: str = Field(alias="accessKeyId")
    secret_access_key: str = Field(alias="secretAccessKey")
    session_token: str = Field(alias="sessionToken")
    expiration: int

    @property
    def expires_at(self) -> datetime:
        """Expiration is reported in epoch milliseconds, truncated here to whole seconds"""
        return datetime.fromtimestamp(self.expiration // 1000, tz=timezone.utc)


class PersistenceResult(BaseModel):
    store_location: Path
    latest_expiry: Optional[datetime] = None
