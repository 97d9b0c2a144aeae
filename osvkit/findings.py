"""Findings reported in the JSON output stream of the Go vulnerability checker."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

_WHITESPACE = re.compile(r"\s*")


@dataclass
class Position:
    """A source position; valid when line is greater than zero."""

    filename: str = ""
    offset: int = 0
    line: int = 0
    column: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Position:
        return cls(
            filename=data.get("filename") or "",
            offset=int(data.get("offset") or 0),
            line=int(data.get("line") or 0),
            column=int(data.get("column") or 0),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.filename:
            data["filename"] = self.filename
        data.update(offset=self.offset, line=self.line, column=self.column)
        return data


@dataclass
class Frame:
    """One entry of a finding's trace."""

    module: str = ""
    version: str = ""
    package: str = ""
    function: str = ""
    receiver: str = ""
    position: Position | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Frame:
        position = data.get("position")
        return cls(
            module=data.get("module") or "",
            version=data.get("version") or "",
            package=data.get("package") or "",
            function=data.get("function") or "",
            receiver=data.get("receiver") or "",
            position=Position.from_dict(position) if position is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"module": self.module}
        for key in ("version", "package", "function", "receiver"):
            value = getattr(self, key)
            if value:
                data[key] = value
        if self.position is not None:
            data["position"] = self.position.to_dict()
        return data


@dataclass
class Finding:
    """A vulnerability found, with the trace from the vulnerable symbol outwards."""

    osv: str = ""
    fixed_version: str = ""
    trace: list[Frame] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Finding:
        return cls(
            osv=data.get("osv") or "",
            fixed_version=data.get("fixed_version") or "",
            trace=[Frame.from_dict(f) for f in data.get("trace") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.osv:
            data["osv"] = self.osv
        if self.fixed_version:
            data["fixed_version"] = self.fixed_version
        if self.trace:
            data["trace"] = [f.to_dict() for f in self.trace]
        return data


@dataclass
class Message:
    """An entry of the output stream; only findings are kept."""

    finding: Finding | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Message:
        finding = data.get("finding")
        return cls(finding=Finding.from_dict(finding) if finding is not None else None)


def parse_messages(text: str) -> list[Message]:
    """Decode a stream of concatenated JSON messages."""
    decoder = json.JSONDecoder()
    messages = []
    pos = _WHITESPACE.match(text, 0).end()
    while pos < len(text):
        value, pos = decoder.raw_decode(text, pos)
        if value is None:
            messages.append(Message())
        elif isinstance(value, dict):
            messages.append(Message.from_dict(value))
        else:
            raise ValueError(f"expected a JSON object in message stream, got {value!r}")
        pos = _WHITESPACE.match(text, pos).end()
    return messages