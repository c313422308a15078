"""Configuration loading with environment overrides."""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError
from ruamel.yaml import YAML, YAMLError

from provisioner.models.config import ProvisionerConfig


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("./configs/provisioner.yaml")

# Environment variable -> dotted config field
ENV_OVERRIDES = {
    "JFROG_URL": "jfrog.url",
    "PROJECT_KEY": "project_key",
    "ORG": "github_org",
    "PROJECT_ID": "gcp.project_id",
    "PROVISIONER_LOG_LEVEL": "log_level",
}

TOKEN_VARIABLES = {
    "jfrog": "JFROG_ADMIN_TOKEN",
    "gcp": "GCP_ACCESS_TOKEN",
}


class ConfigManager:
    """Loads provisioner configuration from YAML and the environment."""

    def __init__(self, config_path: Optional[Path] = None,
                 environ: Optional[Mapping[str, str]] = None):
        """Initialize configuration manager."""
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self.environ = os.environ if environ is None else environ
        self.yaml = YAML(typ="safe")
        self.config: Optional[ProvisionerConfig] = None

    async def load(self) -> ProvisionerConfig:
        """Load configuration, applying environment overrides on top of the file."""
        data: Dict[str, Any] = {}
        if self.config_path.exists():
            logger.info(f"Loading configuration from {self.config_path}")
            try:
                data = await self._read_yaml(self.config_path) or {}
            except YAMLError as e:
                raise ValueError(f"Invalid YAML in {self.config_path}: {e}") from e
            if not isinstance(data, dict):
                raise ValueError(f"Configuration root must be a mapping: {self.config_path}")
        else:
            logger.info(f"No configuration file at {self.config_path}, using defaults")

        self._apply_env(data)

        try:
            self.config = ProvisionerConfig(**data)
        except ValidationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise

        return self.config

    def _apply_env(self, data: Dict[str, Any]):
        for variable, field in ENV_OVERRIDES.items():
            value = self.environ.get(variable)
            if not value:
                continue
            section = data
            *parents, leaf = field.split(".")
            for parent in parents:
                if not isinstance(section.get(parent), dict):
                    section[parent] = {}
                section = section[parent]
            section[leaf] = value
            logger.debug(f"Override {field} from ${variable}")

    def tokens(self) -> Dict[str, str]:
        """Bearer tokens from the environment. Never persisted."""
        return {
            backend: self.environ[variable]
            for backend, variable in TOKEN_VARIABLES.items()
            if self.environ.get(variable)
        }

    async def _read_yaml(self, file_path: Path) -> Any:
        """Read and parse YAML file in a worker thread."""
        content = await asyncio.to_thread(file_path.read_text)
        return self.yaml.load(content)
