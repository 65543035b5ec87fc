"""Scrape the EDGAR series listing to map fund series ids to ETF tickers."""

from __future__ import annotations

import enum
import logging
from html.parser import HTMLParser
from pathlib import Path
from typing import Iterable

from .client import EdgarClient
from .exceptions import DecodeError
from .storage import EtfCatalog

logger = logging.getLogger(__name__)

SERIES_URL = "https://www.sec.gov/cgi-bin/browse-edgar?scd=series&CIK={cik:010d}&action=getcompany"

# Vanguard registrants whose series include ETF share classes.
DEFAULT_CIKS = (36405, 52848, 105563, 106830, 736054, 857489, 891190, 1021882)

ETF_CLASS_LABEL = "ETF Shares"


class State(enum.Enum):
    OUTSIDE_TABLE = "outside_table"
    IN_TABLE_ROW = "in_table_row"
    FOUND_SERIES = "found_series"
    FOUND_ETF = "found_etf"
    IN_ETF_NAME_CELL = "in_etf_name_cell"
    WAITING_FOR_NEXT_SERIES = "waiting_for_next_series"


def _is_series_id(text: str) -> bool:
    return len(text) == 10 and text.startswith("S") and text[1:].isdigit()


class SeriesTableParser(HTMLParser):
    """State machine extracting ``series id -> ETF ticker`` from the listing table.

    Each series row is followed by its share classes; the cell after the
    ``ETF Shares`` label holds the ticker.
    """

    def __init__(self, cik: int) -> None:
        super().__init__(convert_charrefs=True)
        self.cik = cik
        self.state = State.OUTSIDE_TABLE
        self.series_id = ""
        self.series_to_etf: dict[str, str] = {}

    def _transition(self, state: State) -> None:
        logger.debug("Transitioning from %s to %s", self.state.name, state.name)
        self.state = state

    def handle_starttag(self, tag: str, attrs) -> None:
        if tag == "tr" and self.state is State.OUTSIDE_TABLE:
            self._transition(State.IN_TABLE_ROW)
        elif tag == "td" and self.state is State.FOUND_ETF:
            self._transition(State.IN_ETF_NAME_CELL)

    def handle_endtag(self, tag: str) -> None:
        if tag == "table":
            self._transition(State.OUTSIDE_TABLE)
        elif tag == "tr":
            # A row ending right after the label has no ticker cell.
            if self.state in (State.WAITING_FOR_NEXT_SERIES, State.FOUND_ETF):
                self._transition(State.IN_TABLE_ROW)
        elif tag == "td" and self.state is State.IN_ETF_NAME_CELL:
            # Empty ticker cell.
            self._transition(State.WAITING_FOR_NEXT_SERIES)

    def handle_data(self, data: str) -> None:
        text = data.strip()
        if not text:
            return
        if self.state in (State.IN_TABLE_ROW, State.FOUND_SERIES) and _is_series_id(text):
            # A series without ETF class is superseded by the next one.
            self.series_id = text
            self._transition(State.FOUND_SERIES)
        elif self.state is State.FOUND_SERIES:
            if text == ETF_CLASS_LABEL:
                self._transition(State.FOUND_ETF)
        elif self.state is State.IN_ETF_NAME_CELL:
            if text.startswith("C000"):
                raise DecodeError(f"Found a class id instead of a ticker: {text} (cik={self.cik:010d})")
            if text.startswith("S000"):
                raise DecodeError(f"Found a series id instead of a ticker: {text} (cik={self.cik:010d})")
            self.series_to_etf[self.series_id] = text
            self._transition(State.WAITING_FOR_NEXT_SERIES)


def parse_series_html(cik: int, html_text: str) -> dict[str, str]:
    """Return the ``series id -> ETF ticker`` mapping found in ``html_text``."""

    parser = SeriesTableParser(cik)
    parser.feed(html_text)
    parser.close()
    return parser.series_to_etf


def parse_series_file(path: Path | str, cik: int = 1234) -> dict[str, str]:
    """Parse a saved series listing page, useful when debugging the state machine."""

    return parse_series_html(cik, Path(path).read_text(encoding="utf-8", errors="ignore"))


def fetch_series_map(client: EdgarClient, cik: int) -> dict[str, str]:
    url = SERIES_URL.format(cik=cik)
    logger.info("Querying series listing: %s", url)
    body = client.get(url)
    return parse_series_html(cik, body.decode("utf-8", errors="ignore"))


def build_catalog(client: EdgarClient, ciks: Iterable[int] = DEFAULT_CIKS) -> EtfCatalog:
    """Scrape the series listing of every CIK into an :class:`EtfCatalog`."""

    catalog = EtfCatalog()
    for cik in ciks:
        series_to_etf = fetch_series_map(client, cik)
        logger.info("Found %d ETFs for cik=%d", len(series_to_etf), cik)
        catalog.series[cik] = series_to_etf
    return catalog
