"""Cargo.lock files of the Rust package manager."""

from __future__ import annotations

import tomllib
from pathlib import Path

from .packages import (
    DepFile,
    Extractor,
    PackageDetails,
    extract_from_file,
    register_extractor,
)

CARGO_ECOSYSTEM = "crates.io"


class CargoLockExtractor(Extractor):
    """Extracts packages from Cargo.lock files."""

    def should_extract(self, path: str) -> bool:
        return Path(path).name == "Cargo.lock"

    def extract(self, f: DepFile) -> list[PackageDetails]:
        try:
            parsed = tomllib.loads(f.read())
        except tomllib.TOMLDecodeError as exc:
            raise ValueError(f"could not extract from {f.path}: {exc}") from exc

        return [
            PackageDetails(
                name=entry.get("name", ""),
                version=entry.get("version", ""),
                ecosystem=CARGO_ECOSYSTEM,
                compare_as=CARGO_ECOSYSTEM,
            )
            for entry in parsed.get("package", [])
        ]


register_extractor("Cargo.lock", CargoLockExtractor())


def parse_cargo_lock(path_to_lockfile: str) -> list[PackageDetails]:
    """Parse the packages listed in a Cargo.lock file."""
    return extract_from_file(path_to_lockfile, CargoLockExtractor())