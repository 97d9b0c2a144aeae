"""Grouping vulnerabilities that are aliases of one another."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from itertools import combinations

from .vulns import GroupInfo, Vulnerability


@dataclass
class IDAliases:
    """A vulnerability ID together with its aliases."""

    id: str
    aliases: list[str] = field(default_factory=list)


def has_alias_intersection(v1: IDAliases, v2: IDAliases) -> bool:
    """Whether the two share an alias or one's ID is among the other's aliases."""
    if any(alias in v2.aliases for alias in v1.aliases):
        return True
    return v2.id in v1.aliases or v1.id in v2.aliases


def group(vulns: list[IDAliases]) -> list[GroupInfo]:
    """Group vulnerabilities by aliases, ordered by first appearance."""
    groups = list(range(len(vulns)))

    for i, j in combinations(range(len(vulns)), 2):
        if has_alias_intersection(vulns[i], vulns[j]):
            groups[i] = min(groups[i], groups[j])
            groups[j] = groups[i]

    extracted: dict[int, list[str]] = defaultdict(list)
    for vuln, gid in zip(vulns, groups):
        extracted[gid].append(vuln.id)

    return [GroupInfo(ids=sorted(extracted[key])) for key in sorted(extracted)]


def convert_vulnerability_to_id_aliases(vulns: Iterable[Vulnerability]) -> list[IDAliases]:
    """Reduce vulnerabilities to their IDs and aliases."""
    return [IDAliases(id=v.id, aliases=list(v.aliases)) for v in vulns]