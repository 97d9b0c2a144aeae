# osvkit

osvkit is a library that reads dependency lockfiles and package databases into
plain package records. It also provides:

- vulnerability records with alias checks;
- grouping of advisories that are aliases of one another;
- per-directory ignore configuration;
- helpers for call analysis of Go and Rust projects.

## What it does

- **Lockfile extraction** (`osvkit.packages`, `osvkit.extract`). Each reader
  returns a list of `PackageDetails` records, each with name, version, commit,
  ecosystem and compare_as.
  - The registered extractors are `Cargo.lock`, `composer.lock`, `conan.lock`
    and `Gemfile.lock`. `extract_deps` picks one of them from the file name.
  - Alpine installed databases (`osvkit.apk`), Debian dpkg status files
    (`osvkit.dpkg`) and earlier scan results in JSON (`osvkit.osvresults`)
    are read by calling their own functions directly.
- **Vulnerability records** (`osvkit.vulns`). The module holds the
  `Vulnerability`, `Affected`, `Range`, `Event`, `PackageVulns` and
  `GroupInfo` dataclasses, each with `from_dict` / `to_dict`. It also has three
  checks:
  - `include` tells whether a vulnerability, or an alias of it, is already in a
    list.
  - `is_alias_of` tests alias relations.
  - `affects_ecosystem` tells whether any affected entry belongs to an
    ecosystem.
- **Grouping** (`osvkit.grouper`). `group` merges `IDAliases` entries that share
  an alias, or where one's ID is among the other's aliases. Groups come back in
  order of first appearance, with the IDs in each group sorted.
- **Ignore configuration** (`osvkit.config`). It loads `osv-scanner.toml`
  files whose `IgnoredVulns` entries list IDs to ignore, optionally until a
  given `ignoreUntil` time.
  - `ConfigManager.get` finds the file beside a target path, or inside it when
    the target is a directory, and caches what it finds.
  - `ConfigManager.use_override` sets a single config that is used for every
    target.
- **Go call analysis** (`osvkit.goanalysis`, `osvkit.findings`).
  `run_govulncheck` writes the given vulnerabilities to a temporary database
  and runs the `govulncheck` executable against a module. It then groups the
  findings by vulnerability ID. `match_analysis_with_package_vulns` records in
  each group whether each vulnerability is called.
- **Rust helpers** (`osvkit.rustanalysis`):
  - `rust_build_source` runs `cargo build --release` with debug info and LTO,
    and returns the output binary paths named in cargo's `.d` files.
  - `extract_rlib_archive` returns the object file stored in an `.rlib`
    archive.
  - `clean_rust_function_symbols` strips generics and trait-impl qualifiers
    from demangled symbols.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Usage

Extract packages from a lockfile, choosing the extractor by file name:

```python
from osvkit.packages import open_local_dep_file
from osvkit.extract import extract_deps, list_extractors

print(list_extractors())  # ['Cargo.lock', 'composer.lock', 'conan.lock', 'Gemfile.lock']

with open_local_dep_file("path/to/Cargo.lock") as f:
    lockfile = extract_deps(f, "")

for pkg in lockfile.packages:
    print(pkg.name, pkg.version, pkg.ecosystem)
```

Parse a specific format directly:

```python
from osvkit.gemfile import parse_gemfile_lock
from osvkit.dpkg import from_dpkg_status

gems = parse_gemfile_lock("Gemfile.lock")
debian = from_dpkg_status("/var/lib/dpkg/status")
```

Group advisories by alias:

```python
from osvkit.grouper import IDAliases, group

groups = group([IDAliases("CVE-1", ["FOO-1"]), IDAliases("FOO-1", [])])
# [GroupInfo(ids=['CVE-1', 'FOO-1'], ...)]
```

Check the ignore configuration for a scanned file:

```python
from osvkit.config import ConfigManager

manager = ConfigManager()
ignored, entry = manager.get("path/to/Cargo.lock").should_ignore("GO-2022-0968")
```

## Errors

Errors are raised as exceptions:

| Exception | Raised when |
| --- | --- |
| `ExtractorNotFoundError` | no extractor fits a file, or the requested one does not exist |
| `ValueError` | a lockfile cannot be parsed; the message starts with `could not extract from <path>` |
| `OpenNotSupportedError` | a dependency file cannot open other files |
| `ConfigError` | a configuration file is missing or malformed |
| `RustAnalysisError` | a cargo build or an `.rlib` archive fails |

`go_analysis` logs a failure to run `govulncheck` instead of raising.

## What it does not do

- There is no command-line program. osvkit is a library only.
- It does not decide whether a package version lies inside an advisory's
  version ranges. It has no version comparison.
- It does not query any vulnerability database. Records must be supplied by
  the caller.
- It does not read CSV package lists.
- Rust analysis stops at building and unpacking objects. It does not read DWARF
  debug information or demangle symbols, so it cannot say which functions a
  binary calls.
- Go analysis needs the `govulncheck` executable on the `PATH`.