"""Track which filing dates were already fetched for each company."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, MutableMapping

from .exceptions import DecodeError
from .submissions import SubmissionInfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateSpan:
    """Inclusive ``[start, end]`` range of ISO dates, empty when both are ``""``.

    ISO ``YYYY-MM-DD`` dates compare lexically in chronological order, so
    plain string comparison is used throughout.
    """

    start: str = ""
    end: str = ""

    def is_empty(self) -> bool:
        return self.start == "" or self.end == ""

    def __contains__(self, date: str) -> bool:
        return not self.is_empty() and self.start <= date <= self.end

    def extend(self, new_start: str, new_end: str) -> "DateSpan":
        """Return the smallest span covering both this span and ``[new_start, new_end]``.

        The bounds may be given in either order. A span only ever widens, and
        any gap between the two ranges is considered covered.
        """
        if new_start > new_end:
            new_start, new_end = new_end, new_start
        start = new_start if self.start == "" or new_start < self.start else self.start
        end = new_end if self.end == "" or new_end > self.end else self.end
        return DateSpan(start, end)

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict[str, str]) -> "DateSpan":
        return cls(data.get("start", ""), data.get("end", ""))


def filter_filing_dates(
    submissions: Iterable[SubmissionInfo], span: DateSpan
) -> list[SubmissionInfo]:
    """Drop submissions whose filing date is already covered by ``span``."""

    if span.is_empty():
        return list(submissions)
    return [info for info in submissions if info.filing_date not in span]


class FetchedDates(MutableMapping[int, DateSpan]):
    """Persisted mapping of CIK to the span of filing dates already fetched."""

    def __init__(self, path: Path | str, spans: dict[int, DateSpan] | None = None):
        self.path = Path(path)
        self._spans: dict[int, DateSpan] = dict(spans or {})

    @classmethod
    def load(cls, path: Path | str) -> "FetchedDates":
        """Load the mapping from ``path``; a missing file yields an empty mapping."""

        path = Path(path)
        if not path.exists():
            logger.info("No fetched dates at %s, starting from scratch", path)
            return cls(path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            spans = {int(cik): DateSpan.from_dict(span) for cik, span in raw.items()}
        except (ValueError, AttributeError, TypeError) as exc:
            raise DecodeError(f"Couldn't decode the fetched dates file {path}: {exc}") from exc
        return cls(path, spans)

    def save(self) -> None:
        """Write the whole mapping back to :attr:`path`."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {str(cik): span.to_dict() for cik, span in self._spans.items()}
        self.path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

    def extend(self, cik: int, new_start: str, new_end: str) -> DateSpan:
        """Widen the span recorded for ``cik`` and return the result."""

        span = self.get(cik, DateSpan()).extend(new_start, new_end)
        self._spans[cik] = span
        return span

    def __getitem__(self, cik: int) -> DateSpan:
        return self._spans[cik]

    def __setitem__(self, cik: int, span: DateSpan) -> None:
        self._spans[cik] = span

    def __delitem__(self, cik: int) -> None:
        del self._spans[cik]

    def __iter__(self) -> Iterator[int]:
        return iter(self._spans)

    def __len__(self) -> int:
        return len(self._spans)

    def __repr__(self) -> str:
        return f"FetchedDates(path={str(self.path)!r}, spans={self._spans!r})"
