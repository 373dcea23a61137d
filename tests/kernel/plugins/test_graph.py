"""Tests for the dependency graph builder."""

import pytest

from kernel.plugins.declarations import PluginDeclaration
from kernel.plugins.errors import ConfigError
from kernel.plugins.graph import build_graph


def _decl(name, package=None):
    return PluginDeclaration(name, f"tests:{name}", package or name)


class TestBuildGraph:

    def test_empty(self):
        assert build_graph([]) == {}

    def test_default_lookup_has_no_edges(self):
        graph = build_graph([_decl("a"), _decl("b")])
        assert graph == {"a": [], "b": []}

    def test_keys_keep_discovery_order(self):
        graph = build_graph([_decl("zeta"), _decl("alpha"), _decl("mid")])
        assert list(graph) == ["zeta", "alpha", "mid"]

    def test_lookup_results_become_edges(self):
        deps = {"auth": ["core"], "billing": ["auth", "core"]}
        graph = build_graph(
            [_decl("core"), _decl("auth"), _decl("billing")],
            lambda d: deps.get(d.name, []),
        )
        assert graph == {"core": [], "auth": ["core"], "billing": ["auth", "core"]}

    def test_repeated_targets_collapsed(self):
        graph = build_graph([_decl("a"), _decl("b")], lambda d: ["a", "a"] if d.name == "b" else [])
        assert graph["b"] == ["a"]

    def test_lookup_may_return_none(self):
        graph = build_graph([_decl("a")], lambda d: None)
        assert graph == {"a": []}

    def test_unknown_targets_are_kept(self):
        """Dangling targets are reported by the resolver, not here."""
        graph = build_graph([_decl("a")], lambda d: ["ghost"])
        assert graph == {"a": ["ghost"]}

    def test_lookup_receives_declaration(self):
        seen = []
        build_graph([_decl("a", "pkg-a")], lambda d: seen.append(d) or [])
        assert seen == [PluginDeclaration("a", "tests:a", "pkg-a")]


class TestDuplicateNames:

    def test_duplicate_raises_with_both_packages(self):
        with pytest.raises(ConfigError) as exc:
            build_graph([_decl("x", "a"), _decl("x", "b")])
        message = str(exc.value)
        assert "cannot be registered twice" in message
        assert '"x"' in message
        assert '"a"' in message and '"b"' in message

    def test_duplicate_raises_in_either_order(self):
        with pytest.raises(ConfigError, match="registered twice"):
            build_graph([_decl("x", "b"), _decl("x", "a")])

    def test_lookup_not_called_for_duplicate(self):
        calls = []
        with pytest.raises(ConfigError):
            build_graph(
                [_decl("x", "a"), _decl("x", "b")],
                lambda d: calls.append(d.package) or [],
            )
        assert calls == ["a"]
