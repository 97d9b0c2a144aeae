"""Call analysis of Go modules with the Go vulnerability checker."""

from __future__ import annotations

import json
import logging
import os
import subprocess
import tempfile
from collections.abc import Iterable, Mapping

from .findings import Finding, parse_messages
from .vulns import AnalysisInfo, PackageVulns, Vulnerability

_log = logging.getLogger(__name__)


def vulns_from_all_pkgs(
    pkgs: Iterable[PackageVulns],
) -> tuple[list[Vulnerability], dict[str, Vulnerability]]:
    """The unique vulnerabilities of all packages, as a list and keyed by ID."""
    by_id: dict[str, Vulnerability] = {}
    for pv in pkgs:
        for vuln in pv.vulnerabilities:
            by_id[vuln.id] = vuln
    return list(by_id.values()), by_id


def go_analysis(pkgs: list[PackageVulns], source_path: str) -> None:
    """Run call analysis on the module of `source_path` and record it in `pkgs`."""
    vulns, vulns_by_id = vulns_from_all_pkgs(pkgs)
    try:
        results = run_govulncheck(os.path.dirname(source_path), vulns)
    except (OSError, subprocess.SubprocessError, ValueError) as exc:
        _log.error(
            "Failed to run code analysis (govulncheck) on '%s' because %s\n"
            "(the Go toolchain is required)",
            source_path,
            exc,
        )
        return
    match_analysis_with_package_vulns(pkgs, results, vulns_by_id)


def _fill_not_imported_analysis_info(
    vulns_by_id: Mapping[str, Vulnerability],
    vuln_id: str,
    pv: PackageVulns,
    analysis: dict[str, AnalysisInfo],
) -> None:
    """Mark a vulnerability as not called when its advisory carries import data."""
    vuln = vulns_by_id.get(vuln_id)
    if vuln is None:
        return
    for affected in vuln.affected:
        if affected.package.name != pv.package.name:
            continue
        if "imports" in affected.ecosystem_specific:
            # the analysis ran and the vulnerable package is not imported
            analysis[vuln_id] = AnalysisInfo(called=False)


def match_analysis_with_package_vulns(
    pkgs: Iterable[PackageVulns],
    id_to_findings: Mapping[str, list[Finding]],
    vulns_by_id: Mapping[str, Vulnerability],
) -> None:
    """Record in each package's groups whether its vulnerabilities are called."""
    id_to_module_to_called: dict[str, dict[str, bool]] = {}
    for vuln_id, findings in id_to_findings.items():
        id_to_module_to_called.setdefault(vuln_id, {})
        for finding in findings:
            frame = finding.trace[0]
            id_to_module_to_called.setdefault(finding.osv, {})[frame.module] = (
                frame.function != ""
            )

    for pv in pkgs:
        for group in pv.groups:
            analysis = group.experimental_analysis
            for vuln_id in group.ids:
                module_to_called = id_to_module_to_called.get(vuln_id)
                if module_to_called is None:
                    _fill_not_imported_analysis_info(vulns_by_id, vuln_id, pv, analysis)
                    continue
                analysis[vuln_id] = AnalysisInfo(
                    called=module_to_called.get(pv.package.name, False)
                )


def handle_json(text: str) -> dict[str, list[Finding]]:
    """Group the findings of a checker output stream by vulnerability ID."""
    id_to_findings: dict[str, list[Finding]] = {}
    for message in parse_messages(text):
        if message.finding is not None:
            id_to_findings.setdefault(message.finding.osv, []).append(message.finding)
    return id_to_findings


def run_govulncheck(
    moddir: str, vulns: Iterable[Vulnerability]
) -> dict[str, list[Finding]]:
    """Check the module at `moddir` against the given vulnerabilities only."""
    with tempfile.TemporaryDirectory() as dbdir:
        for vuln in vulns:
            with open(
                os.path.join(dbdir, f"{vuln.id}.json"), "w", encoding="utf-8"
            ) as f:
                json.dump(vuln.to_dict(), f)
        os.chmod(dbdir, 0o700)

        completed = subprocess.run(
            [
                "govulncheck",
                "-db",
                f"file://{dbdir}",
                "-C",
                moddir,
                "-json",
                "./...",
            ],
            capture_output=True,
            text=True,
            check=True,
        )

    return handle_json(completed.stdout)