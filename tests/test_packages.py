import os

import pytest

from osvkit.packages import (
    EXTRACTORS,
    DepFile,
    Extractor,
    LocalFile,
    Lockfile,
    OpenNotSupportedError,
    PackageDetails,
    extract_from_file,
    open_local_dep_file,
    register_extractor,
)


class _LineExtractor(Extractor):
    def should_extract(self, path):
        return path.endswith(".lines")

    def extract(self, f):
        return [PackageDetails(name=line) for line in f.read().split("\n") if line]


class _MemoryFile(DepFile):
    def __init__(self, text, path):
        super().__init__(path)
        self._text = text

    def read(self, *args):
        return self._text


def test_open_local_dep_file_reads_content_and_stores_absolute_path(tmp_path):
    target = tmp_path / "deps.txt"
    target.write_text("alpha\nbeta\n", encoding="utf-8")
    with open_local_dep_file(str(target)) as f:
        assert f.read() == "alpha\nbeta\n"
        assert f.path == os.path.abspath(str(target))
        assert os.path.isabs(f.path)


def test_read_with_size(tmp_path):
    target = tmp_path / "deps.txt"
    target.write_text("alpha", encoding="utf-8")
    with open_local_dep_file(str(target)) as f:
        assert f.read(2) == "al"
        assert f.read() == "pha"


def test_open_relative_resolves_against_containing_directory(tmp_path):
    (tmp_path / "a.txt").write_text("first", encoding="utf-8")
    (tmp_path / "b.txt").write_text("second", encoding="utf-8")
    with open_local_dep_file(str(tmp_path / "a.txt")) as f:
        with f.open("b.txt") as nested:
            assert isinstance(nested, LocalFile)
            assert nested.read() == "second"
            assert nested.path == os.path.abspath(str(tmp_path / "b.txt"))


def test_open_absolute_path(tmp_path):
    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "a.txt").write_text("first", encoding="utf-8")
    other = tmp_path / "other.txt"
    other.write_text("elsewhere", encoding="utf-8")
    with open_local_dep_file(str(sub / "a.txt")) as f:
        with f.open(str(other)) as nested:
            assert nested.read() == "elsewhere"


def test_missing_file_raises():
    with pytest.raises(FileNotFoundError):
        open_local_dep_file("definitely/does/not/exist")


def test_close_releases_handle(tmp_path):
    target = tmp_path / "deps.txt"
    target.write_text("alpha", encoding="utf-8")
    f = open_local_dep_file(str(target))
    f.close()
    with pytest.raises(ValueError):
        f.read()


def test_dep_file_open_not_supported_by_default():
    f = _MemoryFile("", "/in/memory")
    with pytest.raises(OpenNotSupportedError, match="does not support opening files"):
        DepFile.open(f, "other")


def test_register_extractor_rejects_duplicates():
    extractor = _LineExtractor()
    register_extractor("test-packages.lines", extractor)
    assert EXTRACTORS["test-packages.lines"] is extractor
    with pytest.raises(ValueError, match="already registered as test-packages.lines"):
        register_extractor("test-packages.lines", _LineExtractor())
    assert EXTRACTORS["test-packages.lines"] is extractor


def test_extract_from_file_runs_extractor(tmp_path):
    target = tmp_path / "deps.lines"
    target.write_text("left-pad\nis-even\n", encoding="utf-8")
    packages = extract_from_file(str(target), _LineExtractor())
    assert packages == [PackageDetails(name="left-pad"), PackageDetails(name="is-even")]


def test_extract_from_missing_file_raises():
    with pytest.raises(FileNotFoundError):
        extract_from_file("definitely/does/not/exist.lines", _LineExtractor())


def test_lockfile_defaults_to_no_packages():
    lockfile = Lockfile(file_path="-", parsed_as="-")
    assert lockfile.packages == []
    assert lockfile == Lockfile("-", "-", [])