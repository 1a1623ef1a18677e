import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from asl.constants import ASL_CONFIG_FILE_PATH
from asl.services.aws.constants import STORE_FILE_MODE
from asl.sso.exceptions import ConfigNotFound, InvalidConfig
from asl.sso.types import SessionConfig


class ConfigStore:
    def __init__(self, path: Path = ASL_CONFIG_FILE_PATH):
        self.path = path

    def save(self, config: SessionConfig) -> Path:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("w") as f:
            f.write(config.model_dump_json(by_alias=True, indent=1))
        os.chmod(self.path, STORE_FILE_MODE)
        logging.debug(f"The asl config file {self.path} has been successfully stored")
        return self.path

    def load(self) -> SessionConfig:
        if not self.path.exists():
            raise ConfigNotFound(
                f"asl config file {self.path} not found. please run: asl sso config set"
            )
        logging.info(f"Loading the asl config file {self.path}")
        try:
            with self.path.open() as f:
                config = SessionConfig.model_validate(json.load(f))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            raise InvalidConfig(f"Could not read the asl config file {self.path}: {e}") from e
        logging.debug(f"The asl config file has been successfully read: {config}")
        return config
