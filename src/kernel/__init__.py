"""plugin-kernel: static plugin ordering for package-managed applications."""

__version__ = "0.1.0"
