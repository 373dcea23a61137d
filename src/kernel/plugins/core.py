"""The kernel's own plugin.

Declared through the plugin-kernel distribution's entry point, so the core
package takes part in discovery like any other and is sorted first as the
primary package.
"""

from __future__ import annotations

from kernel.plugins.base import KernelPlugin


class CorePlugin(KernelPlugin):
    """Anchors the kernel at the head of the plugin order."""
