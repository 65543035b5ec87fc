"""Tests for progress bar helpers."""

from tqdm import std

from etf_holdings.progress import progress_bar


def test_disabled_progress_is_none():
    assert progress_bar(10, "Fetching", enabled=False) is None


def test_console_bar_when_notebook_disabled():
    bar = progress_bar(3, "Fetching cik=36405", use_notebook=False)
    try:
        assert type(bar) is std.tqdm
        bar.update(2)
        assert bar.n == 2
        assert bar.total == 3
        assert bar.unit == "filing"
    finally:
        bar.close()


def test_default_bar_counts():
    bar = progress_bar(2, "Fetching cik=36405")
    try:
        bar.update(1)
        assert bar.n == 1
    finally:
        bar.close()
