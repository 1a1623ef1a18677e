from asl.services.aws.exceptions import ASLException


class SSOConfigException(ASLException):
    pass


class ConfigNotFound(SSOConfigException):
    pass


class InvalidConfig(SSOConfigException):
    pass
