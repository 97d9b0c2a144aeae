import json

import pytest

from osvkit.composer import (
    COMPOSER_ECOSYSTEM,
    ComposerLockExtractor,
    parse_composer_lock,
)
from osvkit.packages import PackageDetails

SENTRY = {
    "name": "sentry/sdk",
    "version": "2.0.4",
    "dist": {"reference": "4c115873c86ad5bd0ac6d962db70ca53bf8fb874"},
}
TOKENIZER = {
    "name": "theseer/tokenizer",
    "version": "1.1.3",
    "dist": {"reference": "11336f6f84e16a720dae9d8e6ed5019efa85a0f9"},
}

EXPECTED_SENTRY = PackageDetails(
    name="sentry/sdk",
    version="2.0.4",
    commit="4c115873c86ad5bd0ac6d962db70ca53bf8fb874",
    ecosystem=COMPOSER_ECOSYSTEM,
    compare_as=COMPOSER_ECOSYSTEM,
)
EXPECTED_TOKENIZER = PackageDetails(
    name="theseer/tokenizer",
    version="1.1.3",
    commit="11336f6f84e16a720dae9d8e6ed5019efa85a0f9",
    ecosystem=COMPOSER_ECOSYSTEM,
    compare_as=COMPOSER_ECOSYSTEM,
)


def _write(tmp_path, content):
    path = tmp_path / "composer.lock"
    path.write_text(content, encoding="utf-8")
    return str(path)


@pytest.mark.parametrize(
    "path, want",
    [
        ("", False),
        ("composer.lock", True),
        ("path/to/my/composer.lock", True),
        ("path/to/my/composer.lock/file", False),
        ("path/to/my/composer.lock.file", False),
        ("path.to.my.composer.lock", False),
    ],
)
def test_should_extract(path, want):
    assert ComposerLockExtractor().should_extract(path) is want


def test_file_does_not_exist(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_composer_lock(str(tmp_path / "does-not-exist"))


def test_invalid_json(tmp_path):
    with pytest.raises(ValueError, match="could not extract from"):
        parse_composer_lock(_write(tmp_path, "this is not json!"))


def test_no_packages(tmp_path):
    content = json.dumps({"packages": [], "packages-dev": []})
    assert parse_composer_lock(_write(tmp_path, content)) == []


def test_one_package(tmp_path):
    content = json.dumps({"packages": [SENTRY], "packages-dev": []})
    assert parse_composer_lock(_write(tmp_path, content)) == [EXPECTED_SENTRY]


def test_one_package_dev(tmp_path):
    content = json.dumps({"packages": [], "packages-dev": [SENTRY]})
    assert parse_composer_lock(_write(tmp_path, content)) == [EXPECTED_SENTRY]


def test_two_packages(tmp_path):
    content = json.dumps({"packages": [SENTRY, TOKENIZER], "packages-dev": []})
    assert parse_composer_lock(_write(tmp_path, content)) == [
        EXPECTED_SENTRY,
        EXPECTED_TOKENIZER,
    ]


def test_two_packages_alt(tmp_path):
    content = json.dumps({"packages": [SENTRY], "packages-dev": [TOKENIZER]})
    assert parse_composer_lock(_write(tmp_path, content)) == [
        EXPECTED_SENTRY,
        EXPECTED_TOKENIZER,
    ]


def test_missing_dist_gives_empty_commit(tmp_path):
    content = json.dumps({"packages": [{"name": "sentry/sdk", "version": "2.0.4"}]})
    [pkg] = parse_composer_lock(_write(tmp_path, content))
    assert pkg.commit == ""
    assert pkg.name == "sentry/sdk"