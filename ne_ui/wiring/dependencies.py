from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ne_app.engine import NodeEngine
from ne_app.services.config_repository import ConfigRepository
from ne_app.services.file_store import JsonFileResourceStore
from ne_common.api import configure_logging
from ne_engine.models.config import EngineConfig
from ne_ui.presenters.variants import create_variant_registry
from ne_ui.ui.console import ConsoleUI

RESOURCES_PATH_ENV = "NE_RESOURCES_PATH"
DEFAULT_RESOURCES_FILE = "resources.json"

__all__ = ["UIContext", "configure_logging", "default_resources_path"]


def default_resources_path() -> Path:
    return Path(os.environ.get(RESOURCES_PATH_ENV) or DEFAULT_RESOURCES_FILE)


@dataclass
class UIContext:
    """Container for CLI services and options, initialized lazily."""

    resources_path: Optional[Path] = None
    config_path: Optional[Path] = None

    _ui: Optional[ConsoleUI] = None
    _config_repository: Optional[ConfigRepository] = None
    _config: Optional[EngineConfig] = None
    _engine: Optional[NodeEngine] = None

    @property
    def ui(self) -> ConsoleUI:
        if self._ui is None:
            self._ui = ConsoleUI()
        return self._ui

    @ui.setter
    def ui(self, value: ConsoleUI) -> None:
        self._ui = value

    @property
    def config_repository(self) -> ConfigRepository:
        if self._config_repository is None:
            self._config_repository = ConfigRepository()
        return self._config_repository

    @config_repository.setter
    def config_repository(self, value: ConfigRepository) -> None:
        self._config_repository = value

    @property
    def config(self) -> EngineConfig:
        if self._config is None:
            self._config = self.config_repository.load(self.config_path)
        return self._config

    @property
    def engine(self) -> NodeEngine:
        if self._engine is None:
            store = JsonFileResourceStore(self.resources_path or default_resources_path())
            engine = NodeEngine(store, self.config)
            engine.registry = create_variant_registry(self.config, engine.slots)
            self._engine = engine
        return self._engine

    def use_config(self, config: EngineConfig) -> None:
        """Replace the active config; the engine is rebuilt on next use."""
        self._config = config
        self._engine = None

    def reset(self) -> None:
        """Drop cached services so the next command starts fresh."""
        self._ui = None
        self._config_repository = None
        self._config = None
        self._engine = None
