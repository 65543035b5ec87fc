"""Flatten stored ETF holdings into a tabular export using Polars."""

from __future__ import annotations

from pathlib import Path

import polars as pl

from .storage import DEFAULT_DATA_DIR, read_json

HOLDINGS_SCHEMA = {
    "etf": pl.Utf8,
    "series_id": pl.Utf8,
    "filing_date": pl.Utf8,
    "component": pl.Utf8,
    "id": pl.Utf8,
    "id_type": pl.Utf8,
    "weight": pl.Float64,
}


def holdings_frame(data_dir: Path | str = DEFAULT_DATA_DIR, *, latest_only: bool = False) -> pl.DataFrame:
    """Return one row per holding across the stored histories."""

    source_dir = Path(data_dir) / ("latest" if latest_only else "all")
    rows: list[dict[str, object]] = []
    for path in sorted(source_dir.glob("*.json")):
        payload = read_json(path)
        indexes = [payload] if latest_only else payload
        for index in indexes:
            for component in index.get("components") or []:
                rows.append(
                    {
                        "etf": path.stem,
                        "series_id": index["series_id"],
                        "filing_date": index["filing_date"],
                        "component": component["name"],
                        "id": component["id"],
                        "id_type": component["id_type"],
                        "weight": float(component["weight"]),
                    }
                )

    if not rows:
        return pl.DataFrame(schema=HOLDINGS_SCHEMA)
    return pl.DataFrame(rows, schema=HOLDINGS_SCHEMA).sort(
        ["etf", "filing_date", "weight"], descending=[False, True, True]
    )


def export_holdings(
    data_dir: Path | str = DEFAULT_DATA_DIR,
    output: Path | str = Path("holdings.csv"),
    *,
    latest_only: bool = False,
) -> pl.DataFrame:
    """Write :func:`holdings_frame` to ``output`` as CSV and return it."""

    frame = holdings_frame(data_dir, latest_only=latest_only)
    output_path = Path(output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frame.write_csv(output_path)
    return frame
