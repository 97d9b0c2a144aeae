"""Packages recorded in a previous scan's JSON results."""

from __future__ import annotations

import json

from .packages import (
    DepFile,
    Extractor,
    Lockfile,
    PackageDetails,
    extract_from_file,
)


class OSVScannerResultsExtractor(Extractor):
    """Extracts the packages listed in scan results; never chosen by path alone."""

    def should_extract(self, path: str) -> bool:
        return False

    def extract(self, f: DepFile) -> list[PackageDetails]:
        try:
            parsed = json.loads(f.read())
        except json.JSONDecodeError as exc:
            raise ValueError(f"could not extract from {f.path}: {exc}") from exc
        if parsed is None:
            return []
        if not isinstance(parsed, dict):
            raise ValueError(f"could not extract from {f.path}: not a JSON object")

        packages = []
        for result in parsed.get("results") or []:
            for entry in result.get("packages") or []:
                info = entry.get("package") or {}
                ecosystem = info.get("ecosystem") or ""
                packages.append(
                    PackageDetails(
                        name=info.get("name") or "",
                        version=info.get("version") or "",
                        ecosystem=ecosystem,
                        compare_as=ecosystem,
                    )
                )
        return packages


def parse_osv_scanner_results(path_to_lockfile: str) -> list[PackageDetails]:
    """Parse the packages out of a scan results file."""
    return extract_from_file(path_to_lockfile, OSVScannerResultsExtractor())


def from_osv_scanner_results(path_to_installed: str) -> Lockfile:
    """Parse a scan results file into a lockfile."""
    return Lockfile(
        file_path=path_to_installed,
        parsed_as="osv-scanner-results",
        packages=parse_osv_scanner_results(path_to_installed),
    )