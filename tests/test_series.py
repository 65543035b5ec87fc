"""Tests for the series listing scraper."""

import pytest

from etf_holdings.exceptions import DecodeError
from etf_holdings.series import (
    SERIES_URL,
    SeriesTableParser,
    State,
    build_catalog,
    parse_series_file,
    parse_series_html,
)


def _series(series_id, name, classes):
    rows = [f'<tr><td></td><td><a href="#">{series_id}</a></td><td>{name}</td></tr>']
    for class_id, label, ticker in classes:
        rows.append(
            f'<tr><td></td><td></td><td><a href="#">{class_id}</a></td>'
            f"<td>{label}</td><td>{ticker}</td></tr>"
        )
    return "".join(rows)


def _page(*series):
    header = "<tr><th>CIK</th><th>Series</th><th>Class/Contract</th><th>Ticker</th></tr>"
    return f"<html><body><table>{header}{''.join(series)}</table></body></html>"


TOTAL_STOCK = _series(
    "S000002848",
    "Vanguard Total Stock Market Index Fund",
    [
        ("C000007800", "Investor Shares", "VTSMX"),
        ("C000007801", "ETF Shares", "VTI"),
        ("C000007802", "Admiral Shares", "VTSAX"),
    ],
)
EXTENDED = _series(
    "S000002849",
    "Vanguard Extended Market Index Fund",
    [("C000007803", "ETF Shares", "VXF")],
)
NO_ETF = _series(
    "S000002850",
    "Vanguard Mid-Cap Index Fund",
    [("C000007804", "Investor Shares", "VIMSX")],
)


class TestParseSeriesHtml:
    """Test parse_series_html function."""

    def test_maps_series_to_etf_ticker(self):
        assert parse_series_html(36405, _page(TOTAL_STOCK, EXTENDED)) == {
            "S000002848": "VTI",
            "S000002849": "VXF",
        }

    def test_series_without_etf_class(self):
        assert parse_series_html(36405, _page(NO_ETF, EXTENDED)) == {"S000002849": "VXF"}

    def test_no_table(self):
        assert parse_series_html(36405, "<html><body>No matching companies</body></html>") == {}

    def test_empty_ticker_cell(self):
        series = (
            '<tr><td><a href="#">S000002848</a></td></tr>'
            '<tr><td><a href="#">C000007801</a></td><td>ETF Shares</td><td></td></tr>'
        )
        assert parse_series_html(36405, _page(series, EXTENDED)) == {"S000002849": "VXF"}

    def test_label_without_ticker_cell(self):
        series = '<tr><td><a href="#">S000002848</a></td></tr><tr><td>ETF Shares</td></tr>'
        assert parse_series_html(36405, _page(series, EXTENDED)) == {"S000002849": "VXF"}

    def test_whitespace_around_values(self):
        series = (
            "<tr><td>\n  S000002848  \n</td></tr>"
            "<tr><td>C000007801</td><td>  ETF Shares </td><td>\n VTI \n</td></tr>"
        )
        assert parse_series_html(36405, _page(series)) == {"S000002848": "VTI"}

    def test_class_id_in_ticker_cell(self):
        series = '<tr><td>S000002848</td></tr><tr><td>ETF Shares</td><td>C000007801</td></tr>'
        with pytest.raises(DecodeError, match="C000007801"):
            parse_series_html(36405, _page(series))

    def test_series_id_in_ticker_cell(self):
        series = '<tr><td>S000002848</td></tr><tr><td>ETF Shares</td><td>S000002849</td></tr>'
        with pytest.raises(DecodeError, match="0000036405"):
            parse_series_html(36405, _page(series))

    def test_parser_ends_outside_table(self):
        parser = SeriesTableParser(36405)
        parser.feed(_page(TOTAL_STOCK))
        parser.close()
        assert parser.state is State.OUTSIDE_TABLE

    def test_parse_series_file(self, tmp_path):
        path = tmp_path / "series.html"
        path.write_text(_page(TOTAL_STOCK), encoding="utf-8")
        assert parse_series_file(path) == {"S000002848": "VTI"}


class PageClient:
    """Client stand-in serving listing pages keyed by URL."""

    def __init__(self, pages):
        self.pages = pages
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        return self.pages[url].encode("utf-8")


def test_build_catalog():
    client = PageClient(
        {
            SERIES_URL.format(cik=36405): _page(TOTAL_STOCK, NO_ETF),
            SERIES_URL.format(cik=52848): _page(EXTENDED),
        }
    )
    catalog = build_catalog(client, [36405, 52848])

    assert catalog.series == {36405: {"S000002848": "VTI"}, 52848: {"S000002849": "VXF"}}
    assert client.urls[0].endswith("CIK=0000036405&action=getcompany")
