"""Vulnerability records, per-package results, and alias and ecosystem checks."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

RANGE_SEMVER = "SEMVER"
RANGE_ECOSYSTEM = "ECOSYSTEM"
RANGE_GIT = "GIT"


def _without_empty(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value not in ("", None, [], {})}


@dataclass
class Event:
    """A single point in an affected range."""

    introduced: str = ""
    fixed: str = ""
    last_affected: str = ""
    limit: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Event:
        return cls(
            introduced=data.get("introduced") or "",
            fixed=data.get("fixed") or "",
            last_affected=data.get("last_affected") or "",
            limit=data.get("limit") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return _without_empty(
            {
                "introduced": self.introduced,
                "fixed": self.fixed,
                "last_affected": self.last_affected,
                "limit": self.limit,
            }
        )


@dataclass
class Range:
    """A range of affected versions described by events."""

    type: str = ""
    repo: str = ""
    events: list[Event] = field(default_factory=list)
    database_specific: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Range:
        return cls(
            type=data.get("type") or "",
            repo=data.get("repo") or "",
            events=[Event.from_dict(e) for e in data.get("events") or []],
            database_specific=dict(data.get("database_specific") or {}),
        )

    def to_dict(self) -> dict[str, Any]:
        return _without_empty(
            {
                "type": self.type,
                "repo": self.repo,
                "events": [e.to_dict() for e in self.events],
                "database_specific": self.database_specific,
            }
        )


@dataclass
class AffectedPackage:
    """The package an affected entry refers to."""

    ecosystem: str = ""
    name: str = ""
    purl: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AffectedPackage:
        return cls(
            ecosystem=data.get("ecosystem") or "",
            name=data.get("name") or "",
            purl=data.get("purl") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        return _without_empty(
            {"ecosystem": self.ecosystem, "name": self.name, "purl": self.purl}
        )


@dataclass
class Affected:
    """One affected package of a vulnerability with its ranges and versions."""

    package: AffectedPackage = field(default_factory=AffectedPackage)
    ranges: list[Range] = field(default_factory=list)
    versions: list[str] = field(default_factory=list)
    ecosystem_specific: dict[str, Any] = field(default_factory=dict)
    database_specific: dict[str, Any] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("package", "ranges", "versions", "ecosystem_specific", "database_specific")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Affected:
        return cls(
            package=AffectedPackage.from_dict(data.get("package") or {}),
            ranges=[Range.from_dict(r) for r in data.get("ranges") or []],
            versions=list(data.get("versions") or []),
            ecosystem_specific=dict(data.get("ecosystem_specific") or {}),
            database_specific=dict(data.get("database_specific") or {}),
            extra={k: v for k, v in data.items() if k not in cls._KNOWN},
        )

    def to_dict(self) -> dict[str, Any]:
        data = {
            "package": self.package.to_dict(),
            "ranges": [r.to_dict() for r in self.ranges],
            "versions": self.versions,
            "ecosystem_specific": self.ecosystem_specific,
            "database_specific": self.database_specific,
        }
        return {**self.extra, **_without_empty(data)}


@dataclass
class Vulnerability:
    """A vulnerability record; fields not modelled here are kept in `extra`."""

    id: str = ""
    aliases: list[str] = field(default_factory=list)
    summary: str = ""
    details: str = ""
    affected: list[Affected] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    _KNOWN = ("id", "aliases", "summary", "details", "affected")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Vulnerability:
        return cls(
            id=data.get("id") or "",
            aliases=list(data.get("aliases") or []),
            summary=data.get("summary") or "",
            details=data.get("details") or "",
            affected=[Affected.from_dict(a) for a in data.get("affected") or []],
            extra={k: v for k, v in data.items() if k not in cls._KNOWN},
        )

    def to_dict(self) -> dict[str, Any]:
        data = _without_empty(
            {
                "aliases": self.aliases,
                "summary": self.summary,
                "details": self.details,
                "affected": [a.to_dict() for a in self.affected],
            }
        )
        return {**self.extra, "id": self.id, **data}


@dataclass
class AnalysisInfo:
    """Result of call analysis for one vulnerability."""

    called: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AnalysisInfo:
        return cls(called=bool(data.get("called", False)))

    def to_dict(self) -> dict[str, Any]:
        return {"called": self.called}


@dataclass
class GroupInfo:
    """A group of vulnerability IDs that are aliases of each other."""

    ids: list[str] = field(default_factory=list)
    experimental_analysis: dict[str, AnalysisInfo] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GroupInfo:
        analysis = data.get("experimentalAnalysis") or {}
        return cls(
            ids=list(data.get("ids") or []),
            experimental_analysis={
                vuln_id: AnalysisInfo.from_dict(info) for vuln_id, info in analysis.items()
            },
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"ids": self.ids}
        if self.experimental_analysis:
            data["experimentalAnalysis"] = {
                vuln_id: info.to_dict()
                for vuln_id, info in self.experimental_analysis.items()
            }
        return data


@dataclass
class PackageInfo:
    """Identity of a scanned package."""

    name: str = ""
    version: str = ""
    ecosystem: str = ""
    commit: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageInfo:
        return cls(
            name=data.get("name") or "",
            version=data.get("version") or "",
            ecosystem=data.get("ecosystem") or "",
            commit=data.get("commit") or "",
        )

    def to_dict(self) -> dict[str, Any]:
        data = {"name": self.name, "version": self.version, "ecosystem": self.ecosystem}
        if self.commit:
            data["commit"] = self.commit
        return data


@dataclass
class PackageVulns:
    """A package together with the vulnerabilities that affect it."""

    package: PackageInfo = field(default_factory=PackageInfo)
    vulnerabilities: list[Vulnerability] = field(default_factory=list)
    groups: list[GroupInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PackageVulns:
        return cls(
            package=PackageInfo.from_dict(data.get("package") or {}),
            vulnerabilities=[
                Vulnerability.from_dict(v) for v in data.get("vulnerabilities") or []
            ],
            groups=[GroupInfo.from_dict(g) for g in data.get("groups") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"package": self.package.to_dict()}
        if self.vulnerabilities:
            data["vulnerabilities"] = [v.to_dict() for v in self.vulnerabilities]
        if self.groups:
            data["groups"] = [g.to_dict() for g in self.groups]
        return data


def is_alias_of(v: Vulnerability, vulnerability: Vulnerability) -> bool:
    """Whether `v` is, or shares an alias with, one of `vulnerability`'s aliases."""
    return any(v.id == alias or alias in v.aliases for alias in vulnerability.aliases)


def include(vs: Iterable[Vulnerability], vulnerability: Vulnerability) -> bool:
    """Whether `vulnerability` or one of its aliases is already among `vs`."""
    return any(
        vuln.id == vulnerability.id
        or is_alias_of(vuln, vulnerability)
        or is_alias_of(vulnerability, vuln)
        for vuln in vs
    )


def affects_ecosystem(v: Vulnerability, ecosystem: str) -> bool:
    """Whether any affected entry of `v` belongs to `ecosystem`."""
    return any(affected.package.ecosystem == ecosystem for affected in v.affected)