"""JSON-file backed resource store used by the CLI."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from ne_app.services.memory_store import InMemoryResourceStore
from ne_common.errors import DataUnavailableError
from ne_engine.models.resource import Resource

logger = logging.getLogger(__name__)


def _extract_records(payload: Any) -> List[Any]:
    if isinstance(payload, dict):
        payload = payload.get("resources", [])
    if not isinstance(payload, list):
        raise ValueError("expected a list of resources or an object with a 'resources' list")
    return payload


def load_resources(path: Path) -> List[Resource]:
    """Read and validate a records file.

    Accepts either a bare JSON list or ``{"resources": [...]}``.
    """
    try:
        payload = json.loads(path.read_text())
        return [Resource.model_validate(item) for item in _extract_records(payload)]
    except (OSError, ValueError, ValidationError) as exc:
        raise DataUnavailableError(
            f"Unable to read resources from {path}",
            context={"path": path},
            cause=exc,
        ) from exc


class JsonFileResourceStore(InMemoryResourceStore):
    """Keep records in memory and rewrite the file after every write."""

    def __init__(self, path: Path, *, create: bool = False) -> None:
        self.path = Path(path)
        if self.path.exists():
            resources = load_resources(self.path)
        elif create:
            resources = []
        else:
            raise DataUnavailableError(
                "Resources file does not exist", context={"path": self.path}
            )
        super().__init__(resources, maintain_paths=True)
        logger.debug("Loaded %d resource(s) from %s", len(resources), self.path)

    def _persisted(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp.write_text(json.dumps({"resources": [r.to_record() for r in self.all_records()]}, indent=2))
        os.replace(tmp, self.path)
