from pathlib import PosixPath

AWS_DIR_PATH = PosixPath("~").expanduser() / ".aws"
AWS_SSO_CACHE_DIR = "sso/cache"
# the aws cli always caches sso tokens here, whatever AWS_CONFIG_FILE says
AWS_SSO_CACHE_DIR_PATH = AWS_DIR_PATH / AWS_SSO_CACHE_DIR
AWS_CONFIG_FILE = "config"
AWS_CREDENTIAL_FILE = "credentials"

AWS_OUTPUT_KEY = "output"
AWS_REGION_KEY = "region"
AWS_SSO_START_URL_KEY = "sso_start_url"
AWS_SSO_REGION_KEY = "sso_region"
AWS_SSO_ACCOUNT_ID_KEY = "sso_account_id"
AWS_SSO_ROLE_KEY = "sso_role_name"
AWS_ACCESS_KEY_ID_KEY = "aws_access_key_id"
AWS_SECRET_ACCESS_KEY_KEY = "aws_secret_access_key"
AWS_SESSION_TOKEN_KEY = "aws_session_token"

AWS_PROFILE_SECTION_PREFIX = "profile "

# aws-cli >= 2.1 writes the first layout, older 2.0.x releases the second
EXPIRES_AT_FORMATS = [
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%SUTC",
]
# zero padded only, strptime alone accepts 2021-3-1T1:0:0Z
EXPIRES_AT_PATTERN = r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(Z|UTC)"

BACKUP_SUFFIX = ".backup_{timestamp}"
MAX_BACKUPS = 3
STORE_FILE_MODE = 0o600
