"""
Tests for core data models — checks, facts, section outcomes, report.
"""

import pytest
from pydantic import ValidationError

from updater_tester.core.models import (
    AssetDescriptor,
    AssetFormat,
    CheckResult,
    ExtractionRecord,
    Fact,
    ProbeResult,
    RunReport,
    SectionId,
    SectionOutcome,
    Severity,
    detect_format,
    fold_exit_mask,
)
from updater_tester.core.models import settings as settings_models

# ── Severity / SectionId ─────────────────────────────────────────────


class TestSeverity:
    def test_ordering(self):
        assert Severity.OK < Severity.WARN < Severity.ERR

    def test_max_folds(self):
        assert max([Severity.OK, Severity.ERR, Severity.WARN]) is Severity.ERR

    def test_label(self):
        assert Severity.WARN.label == "WARN"


class TestSectionId:
    def test_bits(self):
        assert SectionId.INFRA.bit == 1
        assert SectionId.TOOLCHAIN.bit == 2
        assert SectionId.PACKAGE.bit == 4

    def test_str_value(self):
        assert str(SectionId.PACKAGE) == "package"


# ── Facts ────────────────────────────────────────────────────────────


class TestFact:
    def test_absent(self):
        fact = Fact.absent("url")
        assert fact.value == ""
        assert fact.source == ""
        assert not fact.present

    def test_frozen(self):
        fact = Fact(name="tag", value="1.0")
        with pytest.raises(ValidationError):
            fact.value = "2.0"


class TestExtractionRecord:
    def test_first_match_wins(self):
        record = ExtractionRecord()
        assert record.offer("url", "A", "xz_url")
        assert not record.offer("url", "B", "url")
        assert record.value("url") == "A"
        assert record.get("url").source == "xz_url"

    def test_empty_value_rejected(self):
        record = ExtractionRecord()
        assert not record.offer("hash", "", "xz_hash")
        assert record.offer("hash", "h", "hash")
        assert record.value("hash") == "h"

    def test_get_missing_is_absent(self):
        record = ExtractionRecord()
        fact = record.get("nope")
        assert fact.name == "nope"
        assert not fact.present

    def test_to_dict(self):
        record = ExtractionRecord()
        record.offer("tag", "2.40.4", "tag_name")
        assert record.to_dict() == {"tag": {"value": "2.40.4", "source": "tag_name"}}


class TestDetectFormat:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://h/rust-1.80.0.tar.xz", AssetFormat.XZ),
            ("https://h/rust-1.80.0.tar.gz", AssetFormat.GZ),
            ("https://h/rust.tar.xz?sig=1", AssetFormat.XZ),
            ("https://h/fastfetch-linux-amd64.deb", AssetFormat.DEB),
            ("https://h/fastfetch.deb?x", AssetFormat.UNKNOWN),
            ("https://h/archive.zip", AssetFormat.UNKNOWN),
            ("", AssetFormat.UNKNOWN),
        ],
    )
    def test_detect(self, url, expected):
        assert detect_format(url) is expected


class TestAssetDescriptor:
    def test_from_facts(self):
        asset = AssetDescriptor.from_facts(
            Fact(name="url", value="https://h/r.tar.xz", source="xz_url"),
            Fact(name="hash", value="a" * 64, source="xz_hash"),
        )
        assert asset.format is AssetFormat.XZ
        assert asset.expected_hash == "a" * 64
        assert asset.verifiable

    def test_absent_url_not_verifiable(self):
        asset = AssetDescriptor.from_facts(Fact.absent("url"))
        assert asset.format is AssetFormat.UNKNOWN
        assert not asset.verifiable


# ── SectionOutcome ───────────────────────────────────────────────────


def _check(severity: Severity) -> CheckResult:
    return CheckResult(label="x", severity=severity)


class TestSectionOutcome:
    def test_starts_ok(self):
        assert SectionOutcome(section=SectionId.INFRA).severity is Severity.OK

    def test_severity_only_rises(self):
        outcome = SectionOutcome(section=SectionId.TOOLCHAIN)
        outcome.add_check(_check(Severity.ERR))
        outcome.add_check(_check(Severity.OK))
        outcome.add_check(_check(Severity.WARN))
        assert outcome.severity is Severity.ERR
        assert outcome.has_error

    def test_warn_is_not_error(self):
        outcome = SectionOutcome(section=SectionId.PACKAGE)
        outcome.add_check(_check(Severity.WARN))
        assert outcome.severity is Severity.WARN
        assert not outcome.has_error

    def test_counts(self):
        outcome = SectionOutcome(section=SectionId.INFRA)
        for s in (Severity.OK, Severity.OK, Severity.WARN):
            outcome.add_check(_check(s))
        assert outcome.counts == {"OK": 2, "WARN": 1, "ERR": 0}

    def test_absent_fact_not_recorded(self):
        outcome = SectionOutcome(section=SectionId.INFRA)
        outcome.add_fact(Fact.absent("url"))
        outcome.add_fact(Fact(name="tag", value="1.0"))
        assert [f.name for f in outcome.facts] == ["tag"]

    def test_finalized_is_read_only(self):
        outcome = SectionOutcome(section=SectionId.INFRA).finalize()
        with pytest.raises(RuntimeError):
            outcome.add_check(_check(Severity.OK))
        with pytest.raises(RuntimeError):
            outcome.add_note("late")
        with pytest.raises(RuntimeError):
            outcome.add_probe(ProbeResult(target="t", url="u"))


# ── RunReport ────────────────────────────────────────────────────────


def _outcome(section: SectionId, severity: Severity) -> SectionOutcome:
    outcome = SectionOutcome(section=section)
    outcome.add_check(_check(severity))
    return outcome


class TestExitMask:
    def test_empty(self):
        assert fold_exit_mask([]) == 0

    def test_warn_contributes_nothing(self):
        assert fold_exit_mask([_outcome(SectionId.INFRA, Severity.WARN)]) == 0

    def test_bits_are_ored(self):
        mask = fold_exit_mask([
            _outcome(SectionId.INFRA, Severity.OK),
            _outcome(SectionId.TOOLCHAIN, Severity.ERR),
            _outcome(SectionId.PACKAGE, Severity.ERR),
        ])
        assert mask == 6


class TestRunReport:
    def test_add_finalizes(self):
        report = RunReport()
        outcome = _outcome(SectionId.INFRA, Severity.OK)
        report.add(outcome)
        assert outcome.finalized

    def test_skipped(self):
        report = RunReport(selected=[SectionId.TOOLCHAIN, SectionId.PACKAGE])
        report.add(_outcome(SectionId.INFRA, Severity.ERR))
        assert report.skipped == [SectionId.TOOLCHAIN, SectionId.PACKAGE]
        assert report.exit_mask == 1

    def test_probes_in_order(self):
        report = RunReport()
        first = SectionOutcome(section=SectionId.INFRA)
        first.add_probe(ProbeResult(target="a", url="u1", code="200"))
        second = SectionOutcome(section=SectionId.TOOLCHAIN)
        second.add_probe(ProbeResult(target="b", url="u2", code="404"))
        report.add(first)
        report.add(second)
        assert [p.url for p in report.probes] == ["u1", "u2"]

    def test_to_dict(self):
        report = RunReport(selected=[SectionId.PACKAGE], scratch_dir="/tmp/x")
        report.add(_outcome(SectionId.INFRA, Severity.OK))
        data = report.to_dict()
        assert data["exit_mask"] == 0
        assert data["skipped"] == ["package"]
        assert data["sections"][0]["severity"] == "OK"


# ── Settings ─────────────────────────────────────────────────────────


class TestSettings:
    def test_defaults(self):
        settings = settings_models.TesterSettings()
        assert settings.timeouts.connect == 7
        assert settings.endpoints.rust_manifest.endswith("channel-rust-stable.toml")

    def test_fastfetch_urls(self):
        ep = settings_models.Endpoints()
        assert ep.fastfetch_api_latest.endswith("/repos/fastfetch-cli/fastfetch/releases/latest")
        assert ep.fastfetch_release_page("2.40.4").endswith(
            "/fastfetch-cli/fastfetch/releases/tag/2.40.4"
        )
        assert ep.fastfetch_api_tag("2.40.4").endswith("/releases/tags/2.40.4")
