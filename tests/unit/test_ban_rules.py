"""Tests for ban input rules."""

import base64
from datetime import datetime, timedelta, timezone

import pytest

from ghostguard.bans.rules import (
    compute_expires_at,
    new_ban_id,
    normalize_identifiers,
    parse_data_uri,
    parse_timestamp,
)

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestComputeExpiresAt:
    @pytest.mark.parametrize("spec", ["P", "p", "perm", "PERM", "permanent", "Permanent", None, ""])
    def test_permanent(self, spec):
        assert compute_expires_at(spec, now=NOW) is None

    @pytest.mark.parametrize("spec", ["garbage", "2w", "h2", "-5m", "1.5h", "10 m"])
    def test_malformed_is_permanent(self, spec):
        assert compute_expires_at(spec, now=NOW) is None

    @pytest.mark.parametrize("spec,delta", [
        ("30m", timedelta(minutes=30)),
        ("2h", timedelta(hours=2)),
        ("7d", timedelta(days=7)),
        ("2H", timedelta(hours=2)),
        (" 15m ", timedelta(minutes=15)),
    ])
    def test_offsets(self, spec, delta):
        assert compute_expires_at(spec, now=NOW) == NOW + delta

    def test_defaults_to_current_time(self):
        before = datetime.now(timezone.utc)
        result = compute_expires_at("2h")
        assert before + timedelta(hours=2) <= result <= datetime.now(timezone.utc) + timedelta(hours=2)

    def test_explicit_wins_over_duration(self):
        explicit = "2030-05-01T00:00:00Z"
        expected = datetime(2030, 5, 1, tzinfo=timezone.utc)
        assert compute_expires_at("2h", explicit, now=NOW) == expected
        assert compute_expires_at("permanent", explicit, now=NOW) == expected
        assert compute_expires_at("garbage", explicit, now=NOW) == expected

    def test_explicit_in_the_past_still_wins(self):
        explicit = datetime(2020, 1, 1, tzinfo=timezone.utc)
        assert compute_expires_at("7d", explicit, now=NOW) == explicit


class TestParseTimestamp:
    def test_iso_z(self):
        assert parse_timestamp("2026-01-01T12:00:00Z") == NOW

    def test_naive_iso_is_utc(self):
        assert parse_timestamp("2026-01-01T12:00:00") == NOW

    def test_epoch_millis(self):
        assert parse_timestamp(int(NOW.timestamp() * 1000)) == NOW

    def test_empty(self):
        assert parse_timestamp(None) is None
        assert parse_timestamp("") is None

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_timestamp("yesterday")
        with pytest.raises(ValueError):
            parse_timestamp(True)

    @pytest.mark.parametrize("value", [10**20, -(10**20), float("inf"), float("nan")])
    def test_out_of_range_epoch_raises_value_error(self, value):
        with pytest.raises(ValueError):
            parse_timestamp(value)


class TestNormalizeIdentifiers:
    def test_dedupes_and_strips(self):
        result = normalize_identifiers(["license:abc", " license:abc ", "", "  ", None, "steam:1"])
        assert result == ["license:abc", "steam:1"]

    def test_stringifies(self):
        assert normalize_identifiers([123, "123"]) == ["123"]

    def test_non_list(self):
        assert normalize_identifiers("license:abc") == []
        assert normalize_identifiers(None) == []


class TestParseDataUri:
    def test_png(self):
        raw = b"\x89PNG fake"
        image = parse_data_uri("data:image/png;base64," + base64.b64encode(raw).decode())
        assert image.mime == "image/png"
        assert image.data == raw
        assert image.extension == "png"

    @pytest.mark.parametrize("mime", ["image/jpeg", "image/webp", "image/gif"])
    def test_everything_else_is_jpg(self, mime):
        image = parse_data_uri(f"data:{mime};base64,AAAA")
        assert image.extension == "jpg"

    @pytest.mark.parametrize("value", [
        "",
        None,
        "not a data uri",
        "data:text/plain;base64,AAAA",
        "data:image/png,AAAA",
        "data:image/png;base64,",
    ])
    def test_rejects(self, value):
        assert parse_data_uri(value) is None

    def test_bad_base64(self):
        assert parse_data_uri("data:image/png;base64,A") is None


def test_ban_id_shape():
    ban_id = new_ban_id()
    assert ban_id.startswith("GG-")
    assert ban_id[3:].isdigit()
