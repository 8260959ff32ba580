# eim_app/adapters/presets_local/store.py
"""
Sweep presets as JSON files, one per name, in a preset directory.

Each file holds a dumped `SweepConfig` plus the `schema_version` it was
written with. Loading checks that version: presets from the same major
schema are brought up to the current version, anything else is refused.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List

from eim_app.domain.models import SweepConfig

logger = logging.getLogger(__name__)

SCHEMA_VERSION = SweepConfig.model_fields["version"].default


def _slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9_]+", "-", name.strip().lower()).strip("-")
    return slug or "preset"


def _major(version: str) -> str:
    return str(version).split(".", 1)[0]


def migrate(data: Dict[str, Any]) -> Dict[str, Any]:
    """Bring a raw preset dict to the current schema, or raise ValueError."""
    data = dict(data)
    schema = str(data.pop("schema_version", data.get("version", SCHEMA_VERSION)))
    if _major(schema) != _major(SCHEMA_VERSION):
        raise ValueError(
            f"preset schema {schema} is not supported (expected {_major(SCHEMA_VERSION)}.x)"
        )
    if schema != SCHEMA_VERSION:
        logger.info("upgrading preset schema %s -> %s", schema, SCHEMA_VERSION)
    data["version"] = SCHEMA_VERSION
    return data


class LocalPresetStore:
    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = Path(base_dir or Path.cwd() / "presets").resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, name: str) -> Path:
        return self.base_dir / f"{_slugify(name)}.json"

    def list(self) -> List[str]:
        return sorted(p.stem for p in self.base_dir.glob("*.json"))

    def save(self, name: str, cfg: SweepConfig, *, overwrite: bool = True) -> Path:
        path = self.path_for(name)
        if path.exists() and not overwrite:
            raise FileExistsError(f"preset '{name}' already exists at {path}")
        payload = cfg.model_dump(mode="json")
        payload["schema_version"] = SCHEMA_VERSION
        path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        logger.info("saved preset %r to %s", name, path)
        return path

    def load(self, name: str) -> SweepConfig:
        path = self.path_for(name)
        if not path.exists():
            raise KeyError(f"Unknown preset '{name}'. Available: {', '.join(self.list()) or '-'}")
        raw = json.loads(path.read_text(encoding="utf-8"))
        return SweepConfig.model_validate(migrate(raw))

    def remove(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.exists():
            return False
        path.unlink()
        return True
