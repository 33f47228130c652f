"""File-system repository for engine configuration."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Mapping, Optional

from ne_engine.models.config import EngineConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "config.yaml"
CONFIG_PATH_ENV = "NE_CONFIG_PATH"


class ConfigRepository:
    """Resolve, load and persist the engine configuration file."""

    def __init__(
        self,
        config_home: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        xdg = self._environ.get("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
        self.config_home = (config_home or base) / "ne"
        self.default_target = self.config_home / DEFAULT_CONFIG_NAME

    def resolve_config_path(self, config_path: Optional[Path] = None) -> Optional[Path]:
        """Explicit path, then ``NE_CONFIG_PATH``, then the default location."""
        if config_path is not None:
            return Path(config_path).expanduser()
        env_path = self._environ.get(CONFIG_PATH_ENV)
        if env_path:
            return Path(env_path).expanduser()
        if self.default_target.exists():
            return self.default_target
        return None

    def load(self, config_path: Optional[Path] = None) -> EngineConfig:
        """Load the resolved config (defaults when none exists) plus env overrides."""
        resolved = self.resolve_config_path(config_path)
        if resolved is None:
            logger.debug("No engine config found; using defaults")
            config = EngineConfig()
        else:
            logger.debug("Loading engine config from %s", resolved)
            config = EngineConfig.load(resolved)
        return config.with_env_overrides(self._environ)

    def save(self, config: EngineConfig, path: Optional[Path] = None) -> Path:
        target = path or self.default_target
        target.parent.mkdir(parents=True, exist_ok=True)
        config.save(target)
        return target
