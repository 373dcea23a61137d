"""Serialize the resolved plugin order into the registry artifact.

The artifact is a JSON document the host loads at startup:

    {
      "version": 1,
      "plugins": [
        {"name": "plugin-kernel", "implementation": "kernel.plugins.core:CorePlugin",
         "capabilities": ["bundles"]},
        ...
      ]
    }

Identical input always produces byte-identical output, so the file can be
diffed and cached safely.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

ARTIFACT_VERSION = 1

# Relative to the kernel package's own install location
DEFAULT_ARTIFACT_PATH = Path(__file__).resolve().parent.parent / "generated" / "plugins.json"


@dataclass(frozen=True)
class PluginEntry:
    """One plugin of the generated registry."""

    name: str
    implementation: str
    capabilities: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "implementation": self.implementation,
            "capabilities": sorted(self.capabilities),
        }


class RegistryGenerator:
    """Writes the plugin registry artifact."""

    def __init__(self, artifact_path: str | Path = DEFAULT_ARTIFACT_PATH) -> None:
        self.artifact_path = Path(artifact_path)

    @staticmethod
    def generate(entries: Iterable[PluginEntry]) -> str:
        """Return the artifact text for the given entries, in their order."""
        document = {
            "version": ARTIFACT_VERSION,
            "plugins": [entry.to_dict() for entry in entries],
        }
        return json.dumps(document, indent=2, ensure_ascii=False) + "\n"

    def dump(self, entries: Iterable[PluginEntry]) -> Path:
        """Generate the artifact and atomically replace the file on disk.

        The previous artifact stays readable until the new one is complete.
        """
        content = self.generate(entries)
        path = self.artifact_path
        path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            # mkstemp creates 0600 files; the host may run as another user
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise

        logger.info(f"Plugin registry written: {path}")
        return path
