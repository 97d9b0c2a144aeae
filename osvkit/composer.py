"""composer.lock files of the PHP package manager."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from pathlib import Path

from .packages import (
    DepFile,
    Extractor,
    PackageDetails,
    extract_from_file,
    register_extractor,
)

COMPOSER_ECOSYSTEM = "Packagist"


def _packages(entries: Iterable[dict] | None) -> Iterator[PackageDetails]:
    for entry in entries or []:
        dist = entry.get("dist") or {}
        yield PackageDetails(
            name=entry.get("name") or "",
            version=entry.get("version") or "",
            commit=dist.get("reference") or "",
            ecosystem=COMPOSER_ECOSYSTEM,
            compare_as=COMPOSER_ECOSYSTEM,
        )


class ComposerLockExtractor(Extractor):
    """Extracts packages, including development ones, from composer.lock files."""

    def should_extract(self, path: str) -> bool:
        return Path(path).name == "composer.lock"

    def extract(self, f: DepFile) -> list[PackageDetails]:
        try:
            parsed = json.loads(f.read())
        except json.JSONDecodeError as exc:
            raise ValueError(f"could not extract from {f.path}: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError(f"could not extract from {f.path}: not a JSON object")

        return [
            *_packages(parsed.get("packages")),
            *_packages(parsed.get("packages-dev")),
        ]


register_extractor("composer.lock", ComposerLockExtractor())


def parse_composer_lock(path_to_lockfile: str) -> list[PackageDetails]:
    """Parse the packages listed in a composer.lock file."""
    return extract_from_file(path_to_lockfile, ComposerLockExtractor())