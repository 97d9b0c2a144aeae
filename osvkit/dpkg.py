"""Status database of the Debian package manager."""

from __future__ import annotations

import logging
import re
from itertools import groupby

from .packages import (
    DepFile,
    Extractor,
    Lockfile,
    PackageDetails,
    extract_from_file,
)

DEBIAN_ECOSYSTEM = "Debian"
UNKNOWN_PACKAGE_NAME = "<unknown>"

_SOURCE_WITH_VERSION = re.compile(r"(.*)\((.*)\)")
_NOT_INSTALLED_STATES = {"not-installed", "config-files"}

_log = logging.getLogger(__name__)


def _group_lines(text: str) -> list[list[str]]:
    lines = (line.removesuffix("\r") for line in text.split("\n"))
    return [list(group) for filled, group in groupby(lines, key=bool) if filled]


def parse_source_field(source: str) -> tuple[str, str]:
    """Split a "Source" field of the form "name (version)" into name and version."""
    match = _SOURCE_WITH_VERSION.match(source)
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return source.strip(), ""


def _parse_group(group: list[str], path: str) -> PackageDetails | None:
    """Parse one record; None means the package is not installed or unusable."""
    name = ""
    version = ""
    source_present = False
    source_has_version = False

    for line in group:
        if line.startswith("Status:"):
            tokens = line.removeprefix("Status:").split()
            if len(tokens) != 3:
                _log.warning(
                    'malformed DPKG status file. Found no valid "Source" field. File: %s',
                    path,
                )
                return None
            if tokens[2] in _NOT_INSTALLED_STATES:
                return None
        elif line.startswith("Source:"):
            source_present = True
            name, source_version = parse_source_field(line.removeprefix("Source:"))
            if source_version:
                source_has_version = True
                version = source_version
        elif line.startswith("Version:"):
            if not source_has_version:
                version = line.removeprefix("Version:").strip()
        elif line.startswith("Package:"):
            if not source_present:
                name = line.removeprefix("Package:").strip()

    if not version:
        _log.warning(
            "malformed DPKG status file. Found no version number in record. "
            "Package %s. File: %s",
            name or UNKNOWN_PACKAGE_NAME,
            path,
        )

    return PackageDetails(
        name=name,
        version=version,
        ecosystem=DEBIAN_ECOSYSTEM,
        compare_as=DEBIAN_ECOSYSTEM,
    )


class DpkgStatusExtractor(Extractor):
    """Extracts installed packages from /var/lib/dpkg/status."""

    def should_extract(self, path: str) -> bool:
        return path == "/var/lib/dpkg/status"

    def extract(self, f: DepFile) -> list[PackageDetails]:
        packages = []
        for group in _group_lines(f.read()):
            pkg = _parse_group(group, f.path)
            if pkg is None:
                continue
            if not pkg.name:
                _log.warning(
                    "malformed DPKG status file. Found no package name in record. File: %s",
                    f.path,
                )
                continue
            packages.append(pkg)
        return packages


def parse_dpkg_status(path_to_lockfile: str) -> list[PackageDetails]:
    """Parse a dpkg status file, keeping file order."""
    return extract_from_file(path_to_lockfile, DpkgStatusExtractor())


def from_dpkg_status(path_to_status: str) -> Lockfile:
    """Parse a dpkg status file into a lockfile sorted by name and version."""
    packages = sorted(
        parse_dpkg_status(path_to_status), key=lambda p: (p.name, p.version)
    )
    return Lockfile(file_path=path_to_status, parsed_as="dpkg-status", packages=packages)