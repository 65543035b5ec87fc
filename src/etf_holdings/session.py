"""SEC EDGAR session management."""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry


def build_request_headers(user_agent: str) -> dict[str, str]:
    """
    Construct SEC-compliant request headers.

    Args:
        user_agent: Identification string, e.g. "Jane Doe jane@example.com"

    Returns:
        Headers identifying the caller and requesting compressed transfer
    """
    return {
        "User-Agent": user_agent.strip(),
        "Accept-Encoding": "gzip, deflate",
    }


def create_session(user_agent: str) -> requests.Session:
    """
    Create a requests session with SEC headers.

    Failed requests are never retried by the adapter: every attempt must
    pass through the client's gates, so failures are left to the caller.

    Args:
        user_agent: Identification string sent with every request

    Returns:
        Configured requests.Session
    """
    session = requests.Session()

    retry_strategy = Retry(total=0, raise_on_status=False)
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    session.headers.update(build_request_headers(user_agent))

    return session
