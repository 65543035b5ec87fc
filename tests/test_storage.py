"""Tests for catalog and history persistence."""

import json

import pytest

from etf_holdings.exceptions import DecodeError
from etf_holdings.storage import (
    EtfCatalog,
    history_path,
    latest_path,
    load_catalog,
    load_histories,
    load_history,
    merge_index,
    read_json,
    write_catalog,
    write_histories,
)
from etf_holdings.submissions import Index, IndexComponent


def _index(filing_date, weight=1.0, series_id="S000002848"):
    return Index("Fund", series_id, filing_date, [IndexComponent("A", "AAA", "ticker", weight)])


class TestEtfCatalog:
    """Test EtfCatalog lookups and persistence."""

    def test_lookups(self):
        catalog = EtfCatalog({36405: {"S000002848": "VTI", "S000002849": "VXUS"}})
        assert catalog.ciks == [36405]
        assert sorted(catalog.etfs_for(36405)) == ["VTI", "VXUS"]
        assert catalog.etfs_for(1) == []
        assert catalog.etf_name(36405, "S000002848") == "VTI"
        assert catalog.etf_name(36405, "S000000000") is None

    def test_round_trip(self, tmp_path):
        catalog = EtfCatalog({36405: {"S000002849": "VXUS", "S000002848": "VTI"}, 52848: {}})
        path = write_catalog(catalog, tmp_path / "all_etfs.json")

        assert json.loads(path.read_text()) == {
            "36405": [
                {"series_id": "S000002848", "name": "VTI"},
                {"series_id": "S000002849", "name": "VXUS"},
            ],
            "52848": [],
        }
        assert load_catalog(path) == catalog

    def test_invalid_catalog(self, tmp_path):
        path = tmp_path / "all_etfs.json"
        path.write_text('{"36405": [{"name": "VTI"}]}')
        with pytest.raises(DecodeError):
            load_catalog(path)

    def test_read_json_invalid(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{")
        with pytest.raises(DecodeError, match="broken.json"):
            read_json(path)


class TestHistories:
    """Test the per-ETF history files."""

    def test_merge_appends(self):
        history = [_index("2025-09-01")]
        merged = merge_index(history, _index("2025-09-02"))
        assert [index.filing_date for index in merged] == ["2025-09-01", "2025-09-02"]

    def test_merge_replaces_same_date(self):
        history = [_index("2025-09-01", weight=1.0), _index("2025-09-02")]
        merged = merge_index(history, _index("2025-09-01", weight=2.0))
        assert len(merged) == 2
        assert merged[-1].components[0].weight == 2.0

    def test_merge_keeps_other_series_same_date(self):
        history = [_index("2025-09-01", series_id="S000000001")]
        merged = merge_index(history, _index("2025-09-01"))
        assert len(merged) == 2

    def test_write_and_load(self, tmp_path):
        histories = {"VTI": [_index("2025-09-01"), _index("2025-09-03"), _index("2025-09-02")]}
        write_histories(tmp_path, histories)

        stored = load_history(tmp_path, "VTI")
        assert [index.filing_date for index in stored] == ["2025-09-03", "2025-09-02", "2025-09-01"]
        latest = json.loads(latest_path(tmp_path, "VTI").read_text())
        assert latest["filing_date"] == "2025-09-03"
        assert history_path(tmp_path, "VTI") == tmp_path / "all" / "VTI.json"

    def test_empty_history_not_written(self, tmp_path):
        write_histories(tmp_path, {"VTI": []})
        assert not history_path(tmp_path, "VTI").exists()
        assert not latest_path(tmp_path, "VTI").exists()

    def test_missing_history(self, tmp_path):
        assert load_history(tmp_path, "VTI") is None

    def test_load_histories_skips_missing(self, tmp_path, caplog):
        write_histories(tmp_path, {"VTI": [_index("2025-09-01")]})
        histories = load_histories(tmp_path, ["VTI", "VXUS"])
        assert list(histories) == ["VTI"]
        assert "VXUS" in caplog.text

    def test_invalid_history(self, tmp_path):
        path = history_path(tmp_path, "VTI")
        path.parent.mkdir(parents=True)
        path.write_text('[{"name": "Fund"}]')
        with pytest.raises(DecodeError):
            load_history(tmp_path, "VTI")
