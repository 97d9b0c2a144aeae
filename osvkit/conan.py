"""conan.lock files of the C and C++ package manager."""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

from .packages import (
    DepFile,
    Extractor,
    PackageDetails,
    extract_from_file,
    register_extractor,
)

CONAN_ECOSYSTEM = "ConanCenter"


@dataclass
class ConanReference:
    """The parts of a Conan package reference."""

    name: str = ""
    version: str = ""
    username: str = ""
    channel: str = ""
    recipe_revision: str = ""
    package_id: str = ""
    package_revision: str = ""
    timestamp: str = ""


def parse_conan_reference(ref: str) -> ConanReference:
    """Parse name/version[@username[/channel]][#rrev][:pkgid[#prev]][%timestamp]."""
    reference = ConanReference()

    ref, sep, timestamp = ref.partition("%")
    if sep:
        reference.timestamp = timestamp

    ref, sep, package = ref.partition(":")
    if sep:
        reference.package_id, sep, revision = package.partition("#")
        if sep:
            reference.package_revision = revision

    ref, sep, recipe_revision = ref.partition("#")
    if sep:
        reference.recipe_revision = recipe_revision

    ref, sep, user_channel = ref.partition("@")
    if sep:
        reference.username, sep, channel = user_channel.partition("/")
        if sep:
            reference.channel = channel

    name, sep, version = ref.partition("/")
    if sep:
        reference.name, reference.version = name, version
    else:
        # a consumer conanfile might not have a name
        reference.version = ref

    return reference


def _package(reference: ConanReference) -> PackageDetails:
    return PackageDetails(
        name=reference.name,
        version=reference.version,
        ecosystem=CONAN_ECOSYSTEM,
        compare_as=CONAN_ECOSYSTEM,
    )


def _from_graph_nodes(nodes: dict) -> Iterator[PackageDetails]:
    for node in nodes.values():
        if node.get("path"):
            # a local conanfile
            continue
        if node.get("pref"):
            reference = parse_conan_reference(node["pref"])
        elif node.get("ref"):
            reference = parse_conan_reference(node["ref"])
        else:
            continue
        # nameless entries are consumers' conanfiles, not dependencies
        if reference.name:
            yield _package(reference)


def _from_requires(requires: Iterable[str] | None) -> Iterator[PackageDetails]:
    for ref in requires or []:
        reference = parse_conan_reference(ref)
        if reference.name:
            yield _package(reference)


def _parse_lock(lockfile: dict) -> list[PackageDetails]:
    nodes = (lockfile.get("graph_lock") or {}).get("nodes")
    if nodes is not None:
        return list(_from_graph_nodes(nodes))
    return [
        *_from_requires(lockfile.get("requires")),
        *_from_requires(lockfile.get("build_requires")),
        *_from_requires(lockfile.get("python_requires")),
    ]


class ConanLockExtractor(Extractor):
    """Extracts packages from conan.lock files of both the old and new layout."""

    def should_extract(self, path: str) -> bool:
        return Path(path).name == "conan.lock"

    def extract(self, f: DepFile) -> list[PackageDetails]:
        try:
            parsed = json.loads(f.read())
        except json.JSONDecodeError as exc:
            raise ValueError(f"could not extract from {f.path}: {exc}") from exc
        if not isinstance(parsed, dict):
            raise ValueError(f"could not extract from {f.path}: not a JSON object")
        return _parse_lock(parsed)


register_extractor("conan.lock", ConanLockExtractor())


def parse_conan_lock(path_to_lockfile: str) -> list[PackageDetails]:
    """Parse the packages listed in a conan.lock file."""
    return extract_from_file(path_to_lockfile, ConanLockExtractor())