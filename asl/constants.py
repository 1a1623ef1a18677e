from enum import Enum
from pathlib import PosixPath

from rich.theme import Theme

ASL_CONFIG_FILE_PATH = PosixPath("~").expanduser() / ".asl"

DEFAULT_LOG_LEVEL = "info"
DEFAULT_RUN_TIMEOUT_SECONDS = 300

NOISY_LOGGERS = [
    "botocore.credentials",
    "botocore.httpchecksum",
    "botocore.loaders",
    "botocore.session",
    "urllib3.connectionpool",
]


class CaseInsenstiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value):
        return cls(value.lower())


class LogLevel(CaseInsenstiveEnum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


GLOBAL_RICH_CONSOLE_THEME = Theme({"subtle": "grey58"})
