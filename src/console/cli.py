"""plugin-kernel command line.

Run after the package manager installs or updates dependencies:

    plugin-kernel dump              # resolve and write the plugin registry
    plugin-kernel dump --dry-run    # print the registry instead of writing it
    plugin-kernel show              # list the order of the current registry

Exits with status 1 if resolution fails; the previous registry is kept.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from loguru import logger

from console.config import settings
from kernel import __version__
from kernel.plugins.errors import KernelPluginError
from kernel.plugins.generator import RegistryGenerator
from kernel.plugins.implementations import ImplementationRegistry
from kernel.plugins.loader import read_entries
from kernel.plugins.manager import PluginDumper
from kernel.plugins.package import (
    InstalledPackageRepository,
    ManifestPackageRepository,
    PackageRepository,
)


class _LoguruHandler(logging.Handler):
    """Forward stdlib log records from the kernel modules to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(exception=record.exc_info).log(level, record.getMessage())


def _setup_logging(verbosity: int, quiet: bool) -> None:
    if quiet:
        level = "WARNING"
    elif verbosity > 0:
        level = "DEBUG"
    else:
        level = settings.log_level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format="<level>{message}</level>")

    root = logging.getLogger("kernel")
    root.handlers = [_LoguruHandler()]
    root.setLevel(level)
    root.propagate = False


def _repository(manifest: Path | None) -> PackageRepository:
    if manifest is not None:
        logger.debug(f"Reading packages from manifest {manifest}")
        return ManifestPackageRepository(manifest)
    return InstalledPackageRepository(
        metadata_key=settings.metadata_key,
        entry_point_group=settings.entry_point_group,
    )


def _cmd_dump(args: argparse.Namespace) -> int:
    dumper = PluginDumper(
        implementations=ImplementationRegistry(),
        generator=RegistryGenerator(args.output or settings.artifact_path),
        metadata_key=settings.metadata_key,
        primary_package=args.primary or settings.primary_package,
        app_plugin_name=settings.app_plugin_name,
        app_plugin_candidates=settings.app_plugin_candidates,
    )
    repository = _repository(args.manifest or settings.manifest_path)

    if args.dry_run:
        entries = dumper.plan(repository)
        sys.stdout.write(RegistryGenerator.generate(entries))
    else:
        entries = dumper.run(repository)
        logger.info(f"plugin-kernel: wrote {len(entries)} plugins to {dumper.generator.artifact_path}")
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    entries = read_entries(args.artifact or settings.artifact_path)
    for index, entry in enumerate(entries, start=1):
        caps = ", ".join(entry.capabilities)
        line = f"{index:3d}. {entry.name}  ({entry.implementation})"
        if caps:
            line += f"  [{caps}]"
        print(line)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plugin-kernel",
        description="Resolve kernel plugin load order and generate the plugin registry",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Show per-plugin details")
    parser.add_argument("-q", "--quiet", action="store_true", help="Only report warnings and errors")
    sub = parser.add_subparsers(dest="command", required=True)

    dump = sub.add_parser("dump", help="Resolve plugins and write the registry")
    dump.add_argument("--manifest", type=Path, help="JSON package manifest instead of installed packages")
    dump.add_argument("--output", type=Path, help="Registry path (default: inside the kernel package)")
    dump.add_argument("--primary", type=str, help="Package sorted first (default: plugin-kernel)")
    dump.add_argument("--dry-run", action="store_true", help="Print the registry, do not write it")
    dump.set_defaults(func=_cmd_dump)

    show = sub.add_parser("show", help="List the plugins of the current registry")
    show.add_argument("--artifact", type=Path, help="Registry path (default: inside the kernel package)")
    show.set_defaults(func=_cmd_show)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _setup_logging(args.verbose, args.quiet)

    try:
        return args.func(args)
    except KernelPluginError as e:
        logger.error(f"plugin-kernel: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
