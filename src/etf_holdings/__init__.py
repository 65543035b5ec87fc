"""ETF Holdings - Fetch ETF holdings from SEC N-PORT filings."""

__version__ = "1.0.0"

from .batching import find_boundary, select_batch
from .client import EdgarClient
from .exceptions import (
    BadStatusError,
    BoundaryNotFoundError,
    ConfigurationError,
    DecodeError,
    EdgarError,
    FetchError,
    TransportError,
)
from .export import export_holdings, holdings_frame
from .gate import Gate, SystemClock
from .pipeline import PassResult, process_company, run_fetch
from .series import build_catalog, parse_series_html
from .session import create_session
from .spans import DateSpan, FetchedDates, filter_filing_dates
from .storage import EtfCatalog, load_catalog, write_catalog
from .submissions import Index, IndexComponent, SubmissionInfo
from .validation import ValidationResult, validate_index

__all__ = [
    "BadStatusError",
    "BoundaryNotFoundError",
    "ConfigurationError",
    "DateSpan",
    "DecodeError",
    "EdgarClient",
    "EdgarError",
    "EtfCatalog",
    "FetchError",
    "FetchedDates",
    "Gate",
    "Index",
    "IndexComponent",
    "PassResult",
    "SubmissionInfo",
    "SystemClock",
    "TransportError",
    "ValidationResult",
    "build_catalog",
    "create_session",
    "export_holdings",
    "filter_filing_dates",
    "find_boundary",
    "holdings_frame",
    "load_catalog",
    "parse_series_html",
    "process_company",
    "run_fetch",
    "select_batch",
    "validate_index",
    "write_catalog",
]
