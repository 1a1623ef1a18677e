import logging

from asl.services.aws.clients_service import SSOControlPlane
from asl.services.aws.exceptions import LoginError, RenewalFailed, SSOClientError
from asl.services.aws.token_cache import TokenCache
from asl.sso.constants import SessionState
from asl.sso.types import CachedToken, SessionConfig


class SSOSession:
    """Hands out a usable sso access token, logging in at most once to get one.

    The only transition is UNAUTHENTICATED --login--> AUTHENTICATED; a cache that is
    still missing or expired once AUTHENTICATED means the login did not produce a
    session and the run stops with RenewalFailed.
    """

    def __init__(self, config: SessionConfig, client: SSOControlPlane, cache: TokenCache):
        self.config = config
        self.client = client
        self.cache = cache
        self.state = SessionState.UNAUTHENTICATED

    def _login(self):
        logging.info(f"AWS SSO login needed for {self.config.start_url}")
        try:
            self.client.login(self.config.role_name)
        except SSOClientError as e:
            raise LoginError(str(e)) from e
        self.state = SessionState.AUTHENTICATED
        logging.info("The aws sso cache file has been updated successfully")

    def obtain_session(self, force_login: bool = False) -> CachedToken:
        skip_cache = force_login
        while True:
            token = None if skip_cache else self.cache.read(self.config.start_url)
            skip_cache = False
            if token is not None and not token.expired:
                logging.debug(f"The sso cache token is valid until {token.expires_at}")
                return token
            if self.state is SessionState.AUTHENTICATED:
                raise RenewalFailed(
                    "Can not renew the sso token: login succeeded but the cache at"
                    + f" {self.cache.path_for(self.config.start_url)} is still missing or expired"
                )
            self._login()
