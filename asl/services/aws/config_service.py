import configparser
import logging
import os
import shutil
import tempfile
from configparser import RawConfigParser
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from asl.services.aws.constants import (
    AWS_ACCESS_KEY_ID_KEY,
    AWS_CONFIG_FILE,
    AWS_CREDENTIAL_FILE,
    AWS_DIR_PATH,
    AWS_OUTPUT_KEY,
    AWS_PROFILE_SECTION_PREFIX,
    AWS_REGION_KEY,
    AWS_SECRET_ACCESS_KEY_KEY,
    AWS_SESSION_TOKEN_KEY,
    AWS_SSO_ACCOUNT_ID_KEY,
    AWS_SSO_REGION_KEY,
    AWS_SSO_ROLE_KEY,
    AWS_SSO_START_URL_KEY,
    BACKUP_SUFFIX,
    MAX_BACKUPS,
    STORE_FILE_MODE,
)
from asl.services.aws.exceptions import (
    BackupError,
    LoadError,
    NoCredentialsFound,
    WriteError,
)
from asl.sso.constants import OutputFormats
from asl.sso.types import Credential, PersistenceResult, SessionConfig

SimpleNestedDict = dict[str, dict[str, str]]


def load_config_from_file(file: Path) -> RawConfigParser:
    """A missing file loads as an empty config; a file that exists but cannot be
    parsed is an error so that the profiles it holds are never thrown away.
    """
    config = RawConfigParser()
    if not file.exists():
        logging.debug(f"{file} does not exist yet, starting from an empty config")
        return config
    try:
        with file.open() as f:
            config.read_file(f)
    except (OSError, UnicodeDecodeError, configparser.Error) as e:
        raise LoadError(f"Could not load {file}: {e}") from e
    return config


class ProfileStore:
    """An ini file of named profile sections, updated in place one section at a time"""

    def __init__(self, file: Path, backup: bool = False, max_backups: int = MAX_BACKUPS):
        self.file = file
        self.backup = backup
        self.max_backups = max_backups

    def backup_file(self) -> Optional[Path]:
        if not self.file.exists():
            logging.debug(f"Nothing to back up, {self.file} does not exist")
            return None
        timestamp = str(int(datetime.now(tz=timezone.utc).timestamp()))
        backup_path = self.file.with_name(
            self.file.name + BACKUP_SUFFIX.format(timestamp=timestamp)
        )
        # never overwrite a backup taken earlier in the same second
        counter = 0
        while backup_path.exists():
            counter += 1
            backup_path = self.file.with_name(
                self.file.name + BACKUP_SUFFIX.format(timestamp=f"{timestamp}_{counter}")
            )
        try:
            shutil.copy2(self.file, backup_path)
        except OSError as e:
            raise BackupError(f"Could not back up {self.file}: {e}") from e
        logging.info(
            f"Saved backup: {self.file.parent}/{{{self.file.name} -> {backup_path.name}}}"
        )
        self.cleanup_older_backups()
        return backup_path

    def cleanup_older_backups(self):
        backups = self.file.parent.glob(
            self.file.name + BACKUP_SUFFIX.format(timestamp="*")
        )
        by_age = sorted(backups, key=lambda f: (f.stat().st_mtime, f.name))
        to_delete = by_age[: max(len(by_age) - self.max_backups, 0)]
        for backup in to_delete:
            try:
                backup.unlink()
            except OSError as e:
                raise BackupError(f"Could not remove old backup {backup}: {e}") from e
        if to_delete:
            logging.debug(f"Removed {len(to_delete)} older backups of {self.file}")

    def write_sections_to_file(self, config: RawConfigParser):
        tmp_name = None
        try:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.file.name}.", dir=self.file.parent
            )
            with os.fdopen(fd, "w") as f:
                config.write(f)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_name, STORE_FILE_MODE)
            os.replace(tmp_name, self.file)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise WriteError(f"Could not write {self.file}: {e}") from e

    def upsert(self, sections: SimpleNestedDict) -> Path:
        if self.backup:
            self.backup_file()
        config = load_config_from_file(self.file)
        for name, values in sections.items():
            if not config.has_section(name):
                config.add_section(name)
            for key, value in values.items():
                config.set(name, key, value)
        self.write_sections_to_file(config)
        return self.file


class AWSConfigService:
    def __init__(self, aws_dir: Path = AWS_DIR_PATH, backup: bool = False):
        self.config_store = ProfileStore(aws_dir / AWS_CONFIG_FILE, backup=backup)
        self.credential_store = ProfileStore(aws_dir / AWS_CREDENTIAL_FILE, backup=backup)

    def persist_session_profile(
        self, config: SessionConfig, output: OutputFormats = OutputFormats.JSON
    ) -> PersistenceResult:
        logging.debug(f"Preparing to store the aws sso config file {self.config_store.file}")
        section = {
            AWS_OUTPUT_KEY: output.value,
            AWS_REGION_KEY: config.region,
            AWS_SSO_START_URL_KEY: config.start_url,
            AWS_SSO_REGION_KEY: config.region,
            AWS_SSO_ACCOUNT_ID_KEY: config.account_id,
            AWS_SSO_ROLE_KEY: config.role_name,
        }
        path = self.config_store.upsert(
            {f"{AWS_PROFILE_SECTION_PREFIX}{config.role_name}": section}
        )
        logging.info(f"The aws sso config file {path} has been successfully stored")
        return PersistenceResult(store_location=path)

    def persist_credentials(
        self, credentials: list[Credential], output: OutputFormats = OutputFormats.JSON
    ) -> PersistenceResult:
        if not credentials:
            raise NoCredentialsFound("No credentials to persist")
        sections = {
            credential.profile_name: {
                AWS_OUTPUT_KEY: output.value,
                AWS_REGION_KEY: credential.region,
                AWS_ACCESS_KEY_ID_KEY: credential.access_key_id,
                AWS_SECRET_ACCESS_KEY_KEY: credential.secret_access_key,
                AWS_SESSION_TOKEN_KEY: credential.session_token,
            }
            for credential in credentials
        }
        path = self.credential_store.upsert(sections)
        logging.info(f"{len(sections)} credential profiles stored in {path}")
        return PersistenceResult(
            store_location=path,
            latest_expiry=max(credential.expires_at for credential in credentials),
        )
