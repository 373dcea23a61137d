"""Shared fixtures for plugin-kernel tests."""

from __future__ import annotations

import pytest

from kernel.plugins.base import DEPENDENCIES, KernelPlugin
from kernel.plugins.implementations import ImplementationRegistry
from kernel.plugins.package import DEFAULT_METADATA_KEY, Package


def _make_plugin_class(name="TestPlugin", capabilities=(), dependencies=()):
    """Build a KernelPlugin subclass with the given class-level declarations."""
    caps = set(capabilities)
    if dependencies:
        caps.add(DEPENDENCIES)
    return type(name, (KernelPlugin,), {
        "capabilities": frozenset(caps),
        "package_dependencies": tuple(dependencies),
    })


def _make_package(name, plugin=None, replaces=(), complete=True):
    """Build a Package whose extra declares `plugin` under the standard key."""
    extra = {} if plugin is None else {DEFAULT_METADATA_KEY: plugin}
    return Package(name=name, extra=extra, replaces=tuple(replaces), complete=complete)


class StaticRepository:
    """In-memory package repository returning packages in a fixed order."""

    def __init__(self, packages):
        self.packages = list(packages)

    def get_packages(self):
        return list(self.packages)


@pytest.fixture
def make_plugin_class():
    return _make_plugin_class


@pytest.fixture
def make_package():
    return _make_package


@pytest.fixture
def implementations():
    """Implementation table that never imports; tests register explicitly."""
    return ImplementationRegistry(autoload=False)


@pytest.fixture
def build_world(implementations):
    """Build a repository of single-plugin packages plus matching classes.

    Takes (package_name, dependencies) pairs in discovery order; each
    package declares a plugin named after itself, implemented by
    'tests:<package_name>'.
    """

    def _build(*layout):
        packages = []
        for name, deps in layout:
            identifier = f"tests:{name}"
            implementations.register(identifier, _make_plugin_class(name, dependencies=deps))
            packages.append(_make_package(name, identifier))
        return StaticRepository(packages)

    return _build


@pytest.fixture
def static_repository():
    return StaticRepository
