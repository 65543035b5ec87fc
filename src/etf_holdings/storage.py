"""JSON persistence for the ETF catalog and fetched holdings."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from .exceptions import DecodeError
from .submissions import Index

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path("all_etfs.json")
DEFAULT_DATA_DIR = Path("data")


def read_json(path: Path | str) -> Any:
    """Decode the JSON document stored at ``path``."""

    path = Path(path)
    with path.open("r", encoding="utf-8") as handle:
        try:
            return json.load(handle)
        except ValueError as exc:
            raise DecodeError(f"Couldn't JSON decode {path}: {exc}") from exc


def write_json(path: Path | str, payload: Any) -> Path:
    """Replace ``path`` with ``payload`` encoded as JSON."""

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle)
    return path


@dataclass
class EtfCatalog:
    """Known ETFs per company, keyed by CIK then series id."""

    series: dict[int, dict[str, str]] = field(default_factory=dict)

    @property
    def ciks(self) -> list[int]:
        return list(self.series)

    def etfs_for(self, cik: int) -> list[str]:
        return list(self.series.get(cik, {}).values())

    def etf_name(self, cik: int, series_id: str) -> str | None:
        """Return the ETF name for ``series_id``, or ``None`` when unknown."""
        return self.series.get(cik, {}).get(series_id)

    def to_dict(self) -> dict[str, list[dict[str, str]]]:
        return {
            str(cik): [
                {"series_id": series_id, "name": name}
                for series_id, name in sorted(mapping.items())
            ]
            for cik, mapping in self.series.items()
        }

    @classmethod
    def from_dict(cls, data: dict[str, Iterable[dict[str, str]]]) -> "EtfCatalog":
        series: dict[int, dict[str, str]] = {}
        for cik, entries in data.items():
            series[int(cik)] = {entry["series_id"]: entry["name"] for entry in entries}
        return cls(series)


def load_catalog(path: Path | str = DEFAULT_CATALOG_PATH) -> EtfCatalog:
    """Load the catalog written by :func:`write_catalog`."""

    raw = read_json(path)
    try:
        return EtfCatalog.from_dict(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise DecodeError(f"Invalid ETF catalog {path}: {exc}") from exc


def write_catalog(catalog: EtfCatalog, path: Path | str = DEFAULT_CATALOG_PATH) -> Path:
    return write_json(path, catalog.to_dict())


def history_path(data_dir: Path | str, etf: str) -> Path:
    return Path(data_dir) / "all" / f"{etf}.json"


def latest_path(data_dir: Path | str, etf: str) -> Path:
    return Path(data_dir) / "latest" / f"{etf}.json"


def load_history(data_dir: Path | str, etf: str) -> list[Index] | None:
    """Return the stored indexes of ``etf`` or ``None`` when never written."""

    path = history_path(data_dir, etf)
    if not path.exists():
        return None
    raw = read_json(path)
    try:
        return [Index.from_dict(item) for item in raw]
    except (KeyError, TypeError, ValueError) as exc:
        raise DecodeError(f"Invalid index history {path}: {exc}") from exc


def load_histories(data_dir: Path | str, etfs: Iterable[str]) -> dict[str, list[Index]]:
    """Load the histories of ``etfs``, skipping the ones not written yet."""

    histories: dict[str, list[Index]] = {}
    for etf in etfs:
        history = load_history(data_dir, etf)
        if history is None:
            logger.warning("No stored history for %s, treating it as a new ETF", etf)
            continue
        histories[etf] = history
    return histories


def merge_index(history: list[Index], index: Index) -> list[Index]:
    """Add ``index`` to ``history``, replacing any entry for the same series and date."""

    kept = [
        existing
        for existing in history
        if (existing.series_id, existing.filing_date) != (index.series_id, index.filing_date)
    ]
    kept.append(index)
    return kept


def write_histories(data_dir: Path | str, histories: dict[str, list[Index]]) -> None:
    """Write each history newest first, plus its newest index as ``latest``."""

    for etf, indexes in histories.items():
        if not indexes:
            continue
        ordered = sorted(indexes, key=lambda index: index.filing_date, reverse=True)
        histories[etf] = ordered
        write_json(history_path(data_dir, etf), [index.to_dict() for index in ordered])
        write_json(latest_path(data_dir, etf), ordered[0].to_dict())
