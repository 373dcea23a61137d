"""Tests for registry artifact generation."""

import json
import os
from unittest.mock import patch

import pytest

from kernel.plugins.generator import (
    ARTIFACT_VERSION,
    DEFAULT_ARTIFACT_PATH,
    PluginEntry,
    RegistryGenerator,
)

ENTRIES = [
    PluginEntry("plugin-kernel", "kernel.plugins.core:CorePlugin"),
    PluginEntry("auth", "auth.plugin:Plugin", ("routes", "bundles")),
    PluginEntry("app", "app.plugin:Plugin", ("config",)),
]


class TestGenerate:

    def test_document_layout(self):
        document = json.loads(RegistryGenerator.generate(ENTRIES))
        assert document["version"] == ARTIFACT_VERSION
        assert [p["name"] for p in document["plugins"]] == ["plugin-kernel", "auth", "app"]
        assert document["plugins"][1] == {
            "name": "auth",
            "implementation": "auth.plugin:Plugin",
            "capabilities": ["bundles", "routes"],
        }

    def test_byte_identical_for_identical_input(self):
        first = RegistryGenerator.generate(ENTRIES)
        second = RegistryGenerator.generate([PluginEntry(e.name, e.implementation, e.capabilities) for e in ENTRIES])
        assert first == second

    def test_capability_order_does_not_matter(self):
        a = RegistryGenerator.generate([PluginEntry("x", "m:X", ("routes", "bundles"))])
        b = RegistryGenerator.generate([PluginEntry("x", "m:X", ("bundles", "routes"))])
        assert a == b

    def test_plugin_order_preserved(self):
        reordered = list(reversed(ENTRIES))
        document = json.loads(RegistryGenerator.generate(reordered))
        assert [p["name"] for p in document["plugins"]] == ["app", "auth", "plugin-kernel"]

    def test_empty_registry(self):
        document = json.loads(RegistryGenerator.generate([]))
        assert document == {"version": ARTIFACT_VERSION, "plugins": []}

    def test_ends_with_newline(self):
        assert RegistryGenerator.generate(ENTRIES).endswith("}\n")


class TestDump:

    def test_default_path_inside_kernel_package(self):
        assert DEFAULT_ARTIFACT_PATH.parent.name == "generated"
        assert DEFAULT_ARTIFACT_PATH.parent.parent.name == "kernel"

    def test_writes_generated_content(self, tmp_path):
        path = tmp_path / "plugins.json"
        written = RegistryGenerator(path).dump(ENTRIES)
        assert written == path
        assert path.read_text(encoding="utf-8") == RegistryGenerator.generate(ENTRIES)

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "plugins.json"
        RegistryGenerator(path).dump(ENTRIES)
        assert path.exists()

    def test_overwrites_previous_artifact(self, tmp_path):
        path = tmp_path / "plugins.json"
        generator = RegistryGenerator(path)
        generator.dump(ENTRIES)
        generator.dump(ENTRIES[:1])
        assert len(json.loads(path.read_text())["plugins"]) == 1

    def test_no_temporary_files_left(self, tmp_path):
        RegistryGenerator(tmp_path / "plugins.json").dump(ENTRIES)
        assert [p.name for p in tmp_path.iterdir()] == ["plugins.json"]

    def test_failed_write_keeps_old_artifact(self, tmp_path):
        path = tmp_path / "plugins.json"
        generator = RegistryGenerator(path)
        generator.dump(ENTRIES)
        before = path.read_text()

        with patch("kernel.plugins.generator.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(OSError, match="disk full"):
                generator.dump(ENTRIES[:1])

        assert path.read_text() == before
        assert [p.name for p in tmp_path.iterdir()] == ["plugins.json"]

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_artifact_is_world_readable(self, tmp_path):
        path = RegistryGenerator(tmp_path / "plugins.json").dump(ENTRIES)
        assert path.stat().st_mode & 0o044 == 0o044
