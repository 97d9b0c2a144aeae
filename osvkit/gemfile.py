"""Gemfile.lock files of the Ruby bundler."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .packages import (
    DepFile,
    Extractor,
    PackageDetails,
    extract_from_file,
    register_extractor,
)

BUNDLER_ECOSYSTEM = "RubyGems"

_SECTION_BUNDLED = "BUNDLED WITH"
_SECTION_DEPENDENCIES = "DEPENDENCIES"
_SECTION_PLATFORMS = "PLATFORMS"
_SECTION_RUBY = "RUBY VERSION"
_SOURCE_SECTIONS = ("GIT", "GEM", "PATH", "PLUGIN SOURCE")

_NAME_VERSION = re.compile(r"^( +)(.*?)(?: \(([^-]*)(?:-(.*))?\))?(!)?$")
_OPTIONS = re.compile(r"(?i)^ {2}([a-z]+): (.*)$")
_NOT_INDENTED = re.compile(r"^\S")
_REVISION_PREFIX = "  revision: "


class _State(Enum):
    SOURCE = "source"
    DEPENDENCY = "dependency"
    PLATFORM = "platform"
    RUBY = "ruby"
    BUNDLED_WITH = "bundled_with"


_SECTION_STATES = {
    _SECTION_DEPENDENCIES: _State.DEPENDENCY,
    _SECTION_PLATFORMS: _State.PLATFORM,
    _SECTION_RUBY: _State.RUBY,
    _SECTION_BUNDLED: _State.BUNDLED_WITH,
}


def _is_source_section(line: str) -> bool:
    return any(section in line for section in _SOURCE_SECTIONS)


@dataclass
class _GemfileLockParser:
    state: _State | None = None
    dependencies: list[PackageDetails] = field(default_factory=list)
    bundler_version: str = ""
    ruby_version: str = ""
    # commit of the git-based gem group currently being parsed, if any
    current_gem_commit: str = ""

    def _add_dependency(self, name: str, version: str) -> None:
        self.dependencies.append(
            PackageDetails(
                name=name,
                version=version,
                ecosystem=BUNDLER_ECOSYSTEM,
                compare_as=BUNDLER_ECOSYSTEM,
                commit=self.current_gem_commit,
            )
        )

    def _parse_spec(self, line: str) -> None:
        match = _NAME_VERSION.match(line)
        if match is None:
            return
        if len(match.group(1)) == 4:
            self._add_dependency(match.group(2), match.group(3) or "")

    def _parse_source(self, line: str) -> None:
        if line == "  specs":
            return

        options = _OPTIONS.match(line)
        if options is not None:
            whole = options.group(0)
            if whole.startswith(_REVISION_PREFIX):
                self.current_gem_commit = whole.removeprefix(_REVISION_PREFIX)
            return

        self._parse_spec(line)

    def _parse_line_based_on_state(self, line: str) -> None:
        if self.state is _State.RUBY:
            self.ruby_version = line.strip()
        elif self.state is _State.BUNDLED_WITH:
            self.bundler_version = line.strip()
        elif self.state is _State.SOURCE:
            self._parse_source(line)

    def parse(self, line: str) -> None:
        if _is_source_section(line):
            # a new group starts, so forget the previous group's commit
            self.current_gem_commit = ""
            self.state = _State.SOURCE
            self._parse_source(line)
            return

        state = _SECTION_STATES.get(line)
        if state is not None:
            self.state = state
            return

        if _NOT_INDENTED.match(line):
            self.state = None
        if self.state is not None:
            self._parse_line_based_on_state(line)


def _lines(text: str) -> list[str]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]


class GemfileLockExtractor(Extractor):
    """Extracts gems from Gemfile.lock files, in file order."""

    def should_extract(self, path: str) -> bool:
        return Path(path).name == "Gemfile.lock"

    def extract(self, f: DepFile) -> list[PackageDetails]:
        parser = _GemfileLockParser()
        for line in _lines(f.read()):
            parser.parse(line)
        return parser.dependencies


register_extractor("Gemfile.lock", GemfileLockExtractor())


def parse_gemfile_lock(path_to_lockfile: str) -> list[PackageDetails]:
    """Parse the gems listed in a Gemfile.lock file."""
    return extract_from_file(path_to_lockfile, GemfileLockExtractor())