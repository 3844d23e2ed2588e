"""
Basic tests for trade journal utilities and database setup.
"""

from datetime import datetime, timedelta, timezone

import pytest


class TestDatabaseInit:
    """Tests for database initialization."""

    def test_get_db_url_default(self, monkeypatch):
        """Test default database URL."""
        from db.init_db import get_db_url

        monkeypatch.delenv("TRADE_JOURNAL_DB_URL", raising=False)
        url = get_db_url()
        assert "sqlite" in url

    def test_get_db_url_env(self, monkeypatch):
        """Test environment override."""
        from db.init_db import get_db_url

        monkeypatch.setenv("TRADE_JOURNAL_DB_URL", "sqlite:///env.db")
        assert get_db_url() == "sqlite:///env.db"

    def test_get_db_url_explicit(self):
        """Test explicit database URL."""
        from db.init_db import get_db_url

        url = get_db_url("sqlite:///custom.db")
        assert url == "sqlite:///custom.db"


class TestTimestamps:
    """Tests for timestamp helpers."""

    def test_parse_zulu(self):
        from core.utils import parse_timestamp

        assert parse_timestamp("2025-09-28T09:30:00Z") == datetime(2025, 9, 28, 9, 30, tzinfo=timezone.utc)

    def test_parse_offset(self):
        from core.utils import parse_timestamp

        dt = parse_timestamp("2025-09-28T09:30:00+02:00")
        assert dt.utcoffset() == timedelta(hours=2)

    def test_parse_invalid(self):
        from core.utils import parse_timestamp

        with pytest.raises(ValueError):
            parse_timestamp("28/09/2025")

    def test_ensure_utc(self):
        from core.utils import ensure_utc

        naive = datetime(2025, 1, 1, 12)
        assert ensure_utc(naive).tzinfo is timezone.utc
        shifted = datetime(2025, 1, 1, 12, tzinfo=timezone(timedelta(hours=2)))
        assert ensure_utc(shifted).hour == 10

    def test_utc_now_is_aware(self):
        from core.utils import utc_now

        assert utc_now().tzinfo is timezone.utc

    def test_to_utc(self):
        from core.utils import to_utc

        shifted = datetime(2025, 1, 1, 12, tzinfo=timezone(timedelta(hours=2)))
        assert to_utc(shifted) == datetime(2025, 1, 1, 10, tzinfo=timezone.utc)
        # Naive values are local time
        naive = datetime(2025, 1, 1, 12)
        assert to_utc(naive) == naive.astimezone()


class TestConfig:
    """Tests for YAML config loading."""

    def test_load_yaml(self, tmp_path):
        from core.utils import load_yaml_config

        path = tmp_path / "journal.yaml"
        path.write_text("insights:\n  model: test/model\n")
        assert load_yaml_config(str(path)) == {"insights": {"model": "test/model"}}

    def test_missing_file(self, tmp_path):
        from core.utils import load_yaml_config

        assert load_yaml_config(str(tmp_path / "nope.yaml")) == {}
        assert load_yaml_config(None) == {}

    def test_bundled_config(self):
        from pathlib import Path

        from core.aggregation import ANALYTICS_RR_BUCKETS, buckets_from_edges
        from core.utils import load_yaml_config

        config = load_yaml_config(str(Path(__file__).parent.parent / "config" / "journal.yaml"))
        analytics = config["analytics"]
        buckets = buckets_from_edges(analytics["rr_bucket_edges"], analytics["rr_bucket_labels"])
        assert buckets == ANALYTICS_RR_BUCKETS
