"""Choosing an extractor for a dependency file and running it."""

from __future__ import annotations

# Imported for their side effect of registering extractors.
from . import cargo, composer, conan, gemfile  # noqa: F401
from .packages import EXTRACTORS, DepFile, Extractor, Lockfile


class ExtractorNotFoundError(LookupError):
    """Raised when no extractor can be determined for a file."""


def find_extractor(path: str, extract_as: str) -> tuple[Extractor | None, str]:
    """Return the extractor to use and its name, or (None, "") if there is none."""
    if extract_as:
        return EXTRACTORS.get(extract_as), extract_as

    for name, extractor in EXTRACTORS.items():
        if extractor.should_extract(path):
            return extractor, name

    return None, ""


def list_extractors() -> list[str]:
    """Names of all registered extractors, sorted case-insensitively."""
    return sorted(EXTRACTORS, key=str.lower)


def extract_deps(f: DepFile, extract_as: str) -> Lockfile:
    """Extract the packages of a file, sorted by name and version."""
    extractor, extracted_as = find_extractor(f.path, extract_as)

    if extractor is None:
        if extract_as:
            raise ExtractorNotFoundError(
                f"could not determine extractor, requested {extract_as}"
            )
        raise ExtractorNotFoundError(f"could not determine extractor for {f.path}")

    try:
        packages = extractor.extract(f)
    except (ValueError, OSError) as exc:
        if extract_as:
            raise ValueError(f"(extracting as {extracted_as}) {exc}") from exc
        raise

    return Lockfile(
        file_path=f.path,
        parsed_as=extracted_as,
        packages=sorted(packages, key=lambda p: (p.name, p.version)),
    )