"""Tests for the build expiration gate."""
from datetime import date, datetime

import pytest

from expiration_gate import check, evaluate, load_policy, override_present, parse_expiration
from models import ExpirationPolicy, ExpirationStatus, GateDecision


class TestEvaluate:
    def test_expired_without_override_blocked(self):
        assert evaluate(date(2020, 1, 1), date(2025, 1, 1), False) == GateDecision.BLOCKED

    def test_expired_with_override_allowed(self):
        assert evaluate(date(2020, 1, 1), date(2025, 1, 1), True) == GateDecision.ALLOWED

    def test_before_expiration_allowed(self):
        assert evaluate(date(2030, 1, 1), date(2025, 1, 1), False) == GateDecision.ALLOWED

    def test_exactly_at_expiration_allowed(self):
        assert evaluate(datetime(2025, 1, 1), datetime(2025, 1, 1), False) == GateDecision.ALLOWED

    def test_date_counts_as_midnight(self):
        assert evaluate(date(2025, 1, 1), datetime(2025, 1, 1, 9, 30), False) == GateDecision.BLOCKED


class TestParseExpiration:
    @pytest.mark.parametrize("raw,expected", [
        ("12/31/2026", datetime(2026, 12, 31)),
        ("1/5/2026", datetime(2026, 1, 5)),
        ("12/31/2026 11:59:00 PM", datetime(2026, 12, 31, 23, 59)),
        ("2026-12-31", datetime(2026, 12, 31)),
        ("2026-12-31T08:00:00", datetime(2026, 12, 31, 8)),
    ])
    def test_valid(self, raw, expected):
        assert parse_expiration(raw) == (ExpirationStatus.VALID, expected)

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing(self, raw):
        assert parse_expiration(raw) == (ExpirationStatus.MISSING, None)

    @pytest.mark.parametrize("raw", ["31/12/2026", "next year", "2026-13-01"])
    def test_malformed(self, raw):
        assert parse_expiration(raw) == (ExpirationStatus.MALFORMED, None)


class TestOverrideMarker:
    def test_absent(self, tmp_path):
        assert not override_present(tmp_path)

    def test_present(self, tmp_path):
        (tmp_path / "NOEXPIRE").write_text("")
        assert override_present(tmp_path)

    def test_directory_is_not_marker(self, tmp_path):
        (tmp_path / "NOEXPIRE").mkdir()
        assert not override_present(tmp_path)

    def test_load_policy(self, tmp_path):
        (tmp_path / "NOEXPIRE").write_text("")
        policy = load_policy("1/1/2020", tmp_path)
        assert policy.status == ExpirationStatus.VALID
        assert policy.expiration_date == datetime(2020, 1, 1)
        assert policy.override_present


class TestCheck:
    def test_valid_policy_expired(self):
        policy = ExpirationPolicy(expiration_date=datetime(2020, 1, 1), status=ExpirationStatus.VALID)
        assert check(policy, datetime(2025, 1, 1)) == GateDecision.BLOCKED

    def test_missing_metadata_blocks_by_default(self):
        policy = ExpirationPolicy(status=ExpirationStatus.MISSING)
        assert check(policy, datetime(2025, 1, 1)) == GateDecision.BLOCKED

    def test_malformed_metadata_allowed_when_configured(self):
        policy = ExpirationPolicy(status=ExpirationStatus.MALFORMED)
        assert check(policy, datetime(2025, 1, 1), block_on_invalid=False) == GateDecision.ALLOWED

    def test_override_wins_over_missing_metadata(self):
        policy = ExpirationPolicy(status=ExpirationStatus.MISSING, override_present=True)
        assert check(policy, datetime(2025, 1, 1)) == GateDecision.ALLOWED
