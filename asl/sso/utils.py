import logging
import re
from datetime import datetime, timedelta, timezone

from asl.services.aws.constants import EXPIRES_AT_FORMATS, EXPIRES_AT_PATTERN

MATCH_FIRST_CAP = re.compile(r"(.)([A-Z][a-z]+)")
MATCH_ALL_CAP = re.compile(r"([a-z0-9])([A-Z])")
MATCH_EXPIRES_AT = re.compile(EXPIRES_AT_PATTERN)


def snake(text: str) -> str:
    """Hyphenate a mixed-case token, e.g. DevSSOLogin -> Dev-SSO-Login"""
    hyphenated = MATCH_FIRST_CAP.sub(r"\1-\2", text)
    return MATCH_ALL_CAP.sub(r"\1-\2", hyphenated)


def resolve_profile_name(account_name: str, role_index: int, role_name: str) -> str:
    """The first role of an account keeps the bare account name, every later role
    gets its hyphenated role name appended.
    """
    profile_name = account_name.replace(" ", "-")
    if role_index > 0:
        profile_name = f"{profile_name}-{snake(role_name)}"
    return profile_name.lower()


def parse_expires_at(value: str) -> datetime:
    if MATCH_EXPIRES_AT.fullmatch(value):
        for layout in EXPIRES_AT_FORMATS:
            try:
                return datetime.strptime(value, layout).replace(tzinfo=timezone.utc)
            except ValueError:
                continue
    logging.warning(f"Could not parse sso token expiry {value!r}, treating it as expired")
    return datetime.now(tz=timezone.utc) - timedelta(days=1)
