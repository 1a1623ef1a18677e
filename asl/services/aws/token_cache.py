import hashlib
import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from asl.services.aws.constants import AWS_SSO_CACHE_DIR_PATH
from asl.services.aws.exceptions import CacheReadError
from asl.sso.types import CachedToken


def cache_file_name(start_url: str) -> str:
    """The aws cli names its sso cache files after the sha1 of the start url"""
    return hashlib.sha1(start_url.encode("utf-8")).hexdigest().lower() + ".json"


class TokenCache:
    def __init__(self, cache_dir: Path = AWS_SSO_CACHE_DIR_PATH):
        self.cache_dir = cache_dir

    def path_for(self, start_url: str) -> Path:
        return self.cache_dir / cache_file_name(start_url)

    def read(self, start_url: str) -> Optional[CachedToken]:
        path = self.path_for(start_url)
        logging.debug(f"Searching for the aws sso cache file {path}")
        if not path.exists():
            logging.debug(f"aws sso cache file {path} not found")
            return None
        try:
            with path.open() as f:
                token = CachedToken.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise CacheReadError(f"Could not read the aws sso cache file {path}: {e}") from e
        logging.debug(f"Cache file was read successfully, token expires at {token.expires_at}")
        return token
