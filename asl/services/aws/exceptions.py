class ASLException(Exception):
    pass


class SSOClientError(ASLException):
    """Raised by control-plane clients when a call to the identity provider fails"""


class NeedAuth(ASLException):
    pass


class CacheReadError(NeedAuth):
    """The sso cache file exists but could not be read"""


class LoginError(NeedAuth):
    pass


class RenewalFailed(NeedAuth):
    """Login succeeded but the sso cache still holds no usable token"""


class ListAccountsError(ASLException):
    pass


class ListRolesError(ASLException):
    pass


class GetCredentialsError(ASLException):
    pass


class NoCredentialsFound(ASLException):
    pass


class StoreException(ASLException):
    pass


class BackupError(StoreException):
    pass


class LoadError(StoreException):
    pass


class WriteError(StoreException):
    pass


class RunTimeout(ASLException):
    def __init__(self, *args, timeout):
        super().__init__(*args)
        self.timeout = timeout
