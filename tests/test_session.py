"""Tests for session module."""

import requests

from etf_holdings.session import build_request_headers, create_session


class TestBuildRequestHeaders:
    """Test build_request_headers function."""

    def test_headers(self):
        headers = build_request_headers("  Jane Doe jane@example.com ")
        assert headers == {
            "User-Agent": "Jane Doe jane@example.com",
            "Accept-Encoding": "gzip, deflate",
        }


class TestCreateSession:
    """Test create_session function."""

    def test_create_session_returns_session(self):
        """Test that create_session returns a requests.Session."""
        session = create_session("Jane Doe jane@example.com")
        assert isinstance(session, requests.Session)

    def test_session_has_correct_headers(self):
        """Test that session identifies the caller."""
        session = create_session("Jane Doe jane@example.com")
        assert session.headers["User-Agent"] == "Jane Doe jane@example.com"
        assert "gzip" in session.headers["Accept-Encoding"]

    def test_session_never_retries(self):
        """Test that the adapter leaves every retry to the caller."""
        session = create_session("Test")
        for prefix in ("https://www.sec.gov", "http://localhost"):
            retries = session.get_adapter(prefix).max_retries
            assert retries.total == 0
            assert retries.raise_on_status is False
