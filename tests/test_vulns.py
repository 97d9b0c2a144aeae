import pytest

from osvkit.vulns import (
    Affected,
    AffectedPackage,
    AnalysisInfo,
    Event,
    GroupInfo,
    PackageInfo,
    PackageVulns,
    Range,
    Vulnerability,
    affects_ecosystem,
    include,
    is_alias_of,
)


@pytest.mark.parametrize(
    "vs, osv, want",
    [
        ([Vulnerability(id="GHSA-1")], Vulnerability(id="GHSA-2"), False),
        ([Vulnerability(id="GHSA-1")], Vulnerability(id="GHSA-1"), True),
        (
            [Vulnerability(id="GHSA-1", aliases=["GHSA-2"])],
            Vulnerability(id="GHSA-2"),
            True,
        ),
        (
            [Vulnerability(id="GHSA-1")],
            Vulnerability(id="GHSA-2", aliases=["GHSA-1"]),
            True,
        ),
        (
            [Vulnerability(id="GHSA-1", aliases=["CVE-1"])],
            Vulnerability(id="GHSA-2", aliases=["CVE-1"]),
            True,
        ),
        (
            [Vulnerability(id="GHSA-1", aliases=["CVE-2"])],
            Vulnerability(id="GHSA-2", aliases=["CVE-2"]),
            True,
        ),
    ],
)
def test_include(vs, osv, want):
    assert include(vs, osv) is want


def test_include_empty_list():
    assert include([], Vulnerability(id="GHSA-1")) is False


def test_is_alias_of_is_directional():
    a = Vulnerability(id="GHSA-1")
    b = Vulnerability(id="GHSA-2", aliases=["GHSA-1"])
    assert is_alias_of(a, b) is True
    assert is_alias_of(b, a) is False


def _vuln(affected):
    return Vulnerability(
        id="1", details="This is an open source vulnerability!", affected=affected
    )


@pytest.mark.parametrize(
    "affected, ecosystem, expected",
    [
        ([], "Go", False),
        ([], "npm", False),
        ([], "PyPI", False),
        ([], "", False),
        (
            [
                Affected(package=AffectedPackage(ecosystem="crates.io")),
                Affected(package=AffectedPackage(ecosystem="npm")),
                Affected(package=AffectedPackage(ecosystem="PyPI")),
            ],
            "Packagist",
            False,
        ),
        ([Affected(package=AffectedPackage(ecosystem="NuGet"))], "NuGet", True),
        (
            [
                Affected(package=AffectedPackage(ecosystem="npm")),
                Affected(package=AffectedPackage(ecosystem="npm")),
            ],
            "npm",
            True,
        ),
    ],
)
def test_affects_ecosystem(affected, ecosystem, expected):
    assert affects_ecosystem(_vuln(affected), ecosystem) is expected


def test_affects_ecosystem_without_affected():
    assert affects_ecosystem(_vuln([]), "npm") is False


def test_vulnerability_round_trip_keeps_unknown_fields():
    data = {
        "id": "GO-2023-1558",
        "modified": "2023-02-16T00:00:00Z",
        "published": "2023-02-16T00:00:00Z",
        "aliases": ["CVE-2021-3121"],
        "details": "Some details",
        "affected": [
            {
                "package": {"ecosystem": "Go", "name": "github.com/gogo/protobuf"},
                "ranges": [
                    {
                        "type": "SEMVER",
                        "events": [{"introduced": "0"}, {"fixed": "1.3.2"}],
                    }
                ],
                "ecosystem_specific": {"imports": [{"path": "x"}]},
            }
        ],
    }
    vuln = Vulnerability.from_dict(data)
    assert vuln.id == "GO-2023-1558"
    assert vuln.affected[0].ranges[0].events == [Event(introduced="0"), Event(fixed="1.3.2")]
    assert "imports" in vuln.affected[0].ecosystem_specific
    assert vuln.to_dict() == data


def test_range_round_trip():
    rng = Range(type="ECOSYSTEM", events=[Event(introduced="0"), Event(last_affected="2")])
    assert Range.from_dict(rng.to_dict()) == rng


def test_package_vulns_round_trip():
    pv = PackageVulns(
        package=PackageInfo(name="pkg", version="1.0.0", ecosystem="Go"),
        vulnerabilities=[Vulnerability(id="GO-1", aliases=["CVE-1"])],
        groups=[
            GroupInfo(
                ids=["CVE-1", "GO-1"],
                experimental_analysis={"GO-1": AnalysisInfo(called=True)},
            )
        ],
    )
    data = pv.to_dict()
    assert data["groups"][0]["experimentalAnalysis"] == {"GO-1": {"called": True}}
    assert PackageVulns.from_dict(data) == pv


def test_group_info_omits_empty_analysis():
    assert GroupInfo(ids=["A"]).to_dict() == {"ids": ["A"]}