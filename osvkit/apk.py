"""Installed package database of the Alpine Package Keeper."""

from __future__ import annotations

import logging
from itertools import groupby

from .packages import (
    DepFile,
    Extractor,
    Lockfile,
    PackageDetails,
    extract_from_file,
)

ALPINE_ECOSYSTEM = "Alpine"
UNKNOWN_PACKAGE_NAME = "<unknown>"

_log = logging.getLogger(__name__)


def _group_lines(text: str) -> list[list[str]]:
    lines = (line.removesuffix("\r") for line in text.split("\n"))
    return [list(group) for filled, group in groupby(lines, key=bool) if filled]


def _parse_group(group: list[str], path: str) -> PackageDetails:
    fields = {"name": "", "version": "", "commit": ""}
    for line in group:
        if line.startswith("P:"):
            fields["name"] = line[2:]
        elif line.startswith("V:"):
            fields["version"] = line[2:]
        elif line.startswith("c:"):
            fields["commit"] = line[2:]

    if not fields["version"]:
        _log.warning(
            "malformed APK installed file. Found no version number in record. "
            "Package %s. File: %s",
            fields["name"] or UNKNOWN_PACKAGE_NAME,
            path,
        )

    return PackageDetails(
        ecosystem=ALPINE_ECOSYSTEM, compare_as=ALPINE_ECOSYSTEM, **fields
    )


class ApkInstalledExtractor(Extractor):
    """Extracts packages from /lib/apk/db/installed."""

    def should_extract(self, path: str) -> bool:
        return path == "/lib/apk/db/installed"

    def extract(self, f: DepFile) -> list[PackageDetails]:
        packages = []
        for group in _group_lines(f.read()):
            pkg = _parse_group(group, f.path)
            if not pkg.name:
                _log.warning(
                    "malformed APK installed file. Found no package name in record. File: %s",
                    f.path,
                )
                continue
            packages.append(pkg)
        return packages


def parse_apk_installed(path_to_lockfile: str) -> list[PackageDetails]:
    """Parse an apk installed database, keeping file order."""
    return extract_from_file(path_to_lockfile, ApkInstalledExtractor())


def from_apk_installed(path_to_installed: str) -> Lockfile:
    """Parse an apk installed database into a lockfile sorted by name and version."""
    packages = sorted(
        parse_apk_installed(path_to_installed), key=lambda p: (p.name, p.version)
    )
    return Lockfile(
        file_path=path_to_installed, parsed_as="apk-installed", packages=packages
    )