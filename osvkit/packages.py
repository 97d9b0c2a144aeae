"""Core package records, dependency files and the extractor registry."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import IO


class OpenNotSupportedError(Exception):
    """Raised by dependency files that cannot open other files."""


@dataclass(frozen=True)
class PackageDetails:
    """A single package found in a lockfile or package database."""

    name: str = ""
    version: str = ""
    commit: str = ""
    ecosystem: str = ""
    compare_as: str = ""


@dataclass
class Lockfile:
    """The packages extracted from one file, and how it was parsed."""

    file_path: str
    parsed_as: str
    packages: list[PackageDetails] = field(default_factory=list)


class DepFile(ABC):
    """A file opened for extraction that may open other files relative to itself."""

    def __init__(self, path: str) -> None:
        self.path = path

    @abstractmethod
    def read(self, *args) -> str:
        """Read text from the file."""

    def open(self, path: str) -> DepFile:
        """Open another dependency file; unsupported unless overridden."""
        raise OpenNotSupportedError("this file does not support opening files")

    def close(self) -> None:
        """Release any resources held by the file."""

    def __enter__(self) -> DepFile:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class LocalFile(DepFile):
    """A dependency file on the local filesystem."""

    def __init__(self, handle: IO[str], path: str) -> None:
        super().__init__(path)
        self._handle = handle

    def read(self, *args) -> str:
        return self._handle.read(*args)

    def close(self) -> None:
        self._handle.close()

    def open(self, path: str) -> LocalFile:
        """Open `path`, resolving relative paths against this file's directory."""
        if os.path.isabs(path):
            return open_local_dep_file(path)
        return open_local_dep_file(os.path.join(os.path.dirname(self.path), path))


class Extractor(ABC):
    """Knows how to recognise and parse one kind of dependency file."""

    @abstractmethod
    def should_extract(self, path: str) -> bool:
        """Whether this extractor should be used for the given path."""

    @abstractmethod
    def extract(self, f: DepFile) -> list[PackageDetails]:
        """Parse the packages out of an opened dependency file."""


EXTRACTORS: dict[str, Extractor] = {}


def register_extractor(name: str, extractor: Extractor) -> None:
    """Register an extractor under a unique name."""
    if name in EXTRACTORS:
        raise ValueError(f"an extractor is already registered as {name}")
    EXTRACTORS[name] = extractor


def open_local_dep_file(path: str) -> LocalFile:
    """Open a local file for extraction; its path is stored as absolute."""
    handle = open(path, encoding="utf-8")
    return LocalFile(handle, os.path.abspath(path))


def extract_from_file(path_to_lockfile: str, extractor: Extractor) -> list[PackageDetails]:
    """Open a local file and run the extractor over it."""
    with open_local_dep_file(path_to_lockfile) as f:
        return extractor.extract(f)