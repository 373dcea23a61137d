"""Tests for the KernelPlugin base class."""

from kernel.plugins.base import (
    BUNDLES,
    DEPENDENCIES,
    STANDARD_CAPABILITIES,
    KernelPlugin,
    capabilities_of,
)
from kernel.plugins.core import CorePlugin


class TestKernelPlugin:

    def test_defaults(self):
        p = KernelPlugin()
        assert p.capabilities == frozenset()
        assert p.package_dependencies == ()
        assert p.get_bundles() == []
        assert p.get_config_files() == []
        assert p.get_routes() == []

    def test_extension_config_passthrough(self):
        config = {"enabled": True}
        assert KernelPlugin().get_extension_config("framework", config) is config

    def test_subclass_declarations(self):
        class Shop(KernelPlugin):
            capabilities = frozenset({BUNDLES, DEPENDENCIES})
            package_dependencies = ("auth",)

            def get_bundles(self):
                return ["shop.bundle:ShopBundle"]

        assert capabilities_of(Shop) == {BUNDLES, DEPENDENCIES}
        assert capabilities_of(Shop()) == {BUNDLES, DEPENDENCIES}
        assert Shop().get_bundles() == ["shop.bundle:ShopBundle"]

    def test_repr_lists_capabilities(self):
        class Shop(KernelPlugin):
            capabilities = frozenset({DEPENDENCIES, BUNDLES})

        assert "['bundles', 'dependencies']" in repr(Shop())

    def test_capabilities_of_plain_objects(self):
        assert capabilities_of(object()) == frozenset()
        assert capabilities_of(lambda: None) == frozenset()

    def test_standard_capabilities(self):
        assert {BUNDLES, DEPENDENCIES} <= STANDARD_CAPABILITIES


class TestCorePlugin:

    def test_core_plugin_has_no_dependencies(self):
        assert DEPENDENCIES not in CorePlugin.capabilities
        assert isinstance(CorePlugin(), KernelPlugin)
