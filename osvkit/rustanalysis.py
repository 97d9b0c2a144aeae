"""Building Rust projects and reading their object files for call analysis."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from collections.abc import Iterator

# opt-level=3: highest optimisation; debuginfo=1: DWARF info naming called functions;
# embed-bitcode and lto: let unused dynamic dispatch be optimised out;
# codegen-units=1: one object file per library.
RUST_FLAGS = "-C opt-level=3 -C debuginfo=1 -C embed-bitcode=yes -C lto -C codegen-units=1"
RUST_LIB_EXTENSION = ".rcgu.o/"

_AR_MAGIC = b"!<arch>\n"
_AR_HEADER_SIZE = 60

# generics are not part of function names in advisories
_ANTI_GENERIC = re.compile(r"<[\w,]+>", re.ASCII)
# fully qualified trait implementations are not used in advisories either
_ANTI_TRAIT_IMPL = re.compile(r"<(.*) as .*>")

_log = logging.getLogger(__name__)


class RustAnalysisError(Exception):
    """Raised when a Rust project cannot be built or its outputs read."""


def _ar_members(data: bytes, path: str) -> Iterator[tuple[str, bytes]]:
    if not data.startswith(_AR_MAGIC):
        raise RustAnalysisError(f".rlib file '{path}' is not valid ar archive")
    pos = len(_AR_MAGIC)
    while pos < len(data):
        header = data[pos : pos + _AR_HEADER_SIZE]
        if len(header) < _AR_HEADER_SIZE:
            raise RustAnalysisError(f"truncated ar header in '{path}'")
        name = header[:16].rstrip(b" ").decode("utf-8", "replace")
        try:
            size = int(header[48:58].strip() or b"0")
        except ValueError as exc:
            raise RustAnalysisError(f"invalid ar member size in '{path}'") from exc
        start = pos + _AR_HEADER_SIZE
        end = start + size
        if end > len(data):
            raise RustAnalysisError(f"truncated ar member '{name}' in '{path}'")
        yield name, data[start:end]
        pos = end + size % 2


def extract_rlib_archive(rlib_path: str) -> bytes:
    """The ELF object file stored in an .rlib archive."""
    try:
        with open(rlib_path, "rb") as f:
            data = f.read()
    except OSError as exc:
        raise RustAnalysisError(f"failed to open .rlib file '{rlib_path}': {exc}") from exc

    for name, content in _ar_members(data, rlib_path):
        if name == "//":
            # GNU ar keeps long file names in the "//" member
            filename = content.decode("utf-8", "replace").strip()
            # there should be a single object file since codegen-units=1
            if not filename.endswith(RUST_LIB_EXTENSION):
                _log.warning("rlib archive contents were unexpected: %s", filename)
        # "/0" refers to the first name in the "//" member
        if name == "/0" or name.endswith(RUST_LIB_EXTENSION):
            return content

    raise RustAnalysisError(f"no object file found in archive '{rlib_path}'")


def rust_build_source(source_path: str) -> list[str]:
    """Build the cargo project of `source_path` and return the output binary paths."""
    project_dir = os.path.dirname(source_path)
    cmd = ["cargo", "build", "--workspace", "--all-targets", "--release"]
    env = {**os.environ, "RUSTFLAGS": RUST_FLAGS}

    _log.info("Begin building rust/cargo project")
    try:
        subprocess.run(
            cmd, cwd=project_dir, env=env, capture_output=True, text=True, check=True
        )
    except subprocess.CalledProcessError as exc:
        _log.error("cargo stdout:\n%s", exc.stdout or "")
        _log.error("cargo stderr:\n%s", exc.stderr or "")
        raise RustAnalysisError(f"failed to run `{' '.join(cmd)}`: {exc}") from exc
    except OSError as exc:
        raise RustAnalysisError(f"failed to run `{' '.join(cmd)}`: {exc}") from exc

    output_dir = os.path.join(project_dir, "target", "release")
    try:
        entries = sorted(os.scandir(output_dir), key=lambda e: e.name)
    except OSError as exc:
        raise RustAnalysisError(f'failed to read "{output_dir}" dir: {exc}') from exc

    binary_paths = []
    for entry in entries:
        # cargo writes a .d file naming each output binary or library
        if entry.is_dir() or not entry.name.endswith(".d"):
            continue
        try:
            with open(entry.path, encoding="utf-8") as f:
                content = f.read()
        except OSError as exc:
            raise RustAnalysisError(f'failed to read "{entry.path}": {exc}') from exc
        parts = content.split(": ")
        if len(parts) != 2:
            raise RustAnalysisError("file path contains ': ', which is unsupported")
        binary_paths.append(parts[0])

    return binary_paths


def clean_rust_function_symbols(val: str) -> str:
    """Reduce a demangled Rust symbol to the form used in advisories."""
    val = _ANTI_GENERIC.sub("", val)
    return _ANTI_TRAIT_IMPL.sub(r"\1", val)