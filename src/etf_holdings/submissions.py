"""Decode EDGAR submission indexes and N-PORT filings into holdings."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .client import EdgarClient

logger = logging.getLogger(__name__)

# Leading zeros of the CIK are dropped by formatting it as an int.
SINGLE_SUBMISSION_URL = "https://www.sec.gov/Archives/edgar/data/{cik}/{accession}/primary_doc.xml"
# From https://www.sec.gov/search-filings/edgar-application-programming-interfaces
ALL_SUBMISSIONS_URL = "https://data.sec.gov/submissions/CIK{cik:010d}.json"

NPORT_FORM = "NPORT-P"

DERIVATIVE_TAGS = (
    "fwdDeriv",
    "futrDeriv",
    "swapDeriv",
    "optionSwaptionWarrantDeriv",
    "othDeriv",
)
IGNORED_OTHER_DESCRIPTIONS = {"CONTRACT_VANGUARD_ID"}


@dataclass(frozen=True)
class SubmissionInfo:
    """A filing waiting to be fetched."""

    cik: int
    accession_number: str
    filing_date: str

    @property
    def url(self) -> str:
        return SINGLE_SUBMISSION_URL.format(cik=self.cik, accession=self.accession_number)


@dataclass
class IndexComponent:
    """A single holding of an index."""

    name: str
    id: str
    id_type: str
    weight: float

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IndexComponent":
        return cls(
            name=data["name"],
            id=data["id"],
            id_type=data["id_type"],
            weight=float(data["weight"]),
        )


@dataclass
class Index:
    """Holdings of one fund series as reported on one filing date.

    The component weights may add up to more than 100%.
    """

    name: str
    series_id: str
    filing_date: str
    components: list[IndexComponent] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Index":
        return cls(
            name=data["name"],
            series_id=data["series_id"],
            filing_date=data["filing_date"],
            components=[IndexComponent.from_dict(item) for item in data.get("components") or []],
        )


def join_accession_number(accession_number: str) -> str:
    """Return ``accession_number`` without its dashes."""

    return accession_number.replace("-", "")


def parse_all_submissions(
    payload: dict[str, Any], cik: int, form: str = NPORT_FORM
) -> list[SubmissionInfo]:
    """Extract ``form`` filings from a submissions JSON, newest first."""

    recent = payload["filings"]["recent"]
    accession_numbers = recent["accessionNumber"]
    forms = recent["form"]
    infos = [
        SubmissionInfo(cik, join_accession_number(accession_numbers[i]), filing_date)
        for i, filing_date in enumerate(recent["filingDate"])
        if forms[i] == form
    ]
    infos.sort(key=lambda info: info.filing_date, reverse=True)
    return infos


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element | None, name: str) -> Iterator[ET.Element]:
    if element is None:
        return
    for child in element:
        if _local_name(child.tag) == name:
            yield child


def _child(element: ET.Element | None, name: str) -> ET.Element | None:
    return next(_children(element, name), None)


def _text(element: ET.Element | None, name: str) -> str:
    child = _child(element, name)
    if child is None or child.text is None:
        return ""
    return child.text.strip()


def _attr(element: ET.Element | None, name: str, attribute: str) -> str:
    child = _child(element, name)
    if child is None:
        return ""
    return child.get(attribute, "")


def _is_derivative(holding: ET.Element) -> bool:
    info = _child(holding, "derivativeInfo")
    return any(_attr(info, tag, "derivCat") for tag in DERIVATIVE_TAGS)


def _identifier(holding: ET.Element) -> tuple[str, str]:
    """Return ``(id, id_type)`` preferring ISIN, then ticker, then other ids."""

    identifiers = _child(holding, "identifiers")
    isin = _attr(identifiers, "isin", "value")
    if isin:
        return isin, "isin"
    ticker = _attr(identifiers, "ticker", "value")
    if ticker:
        return ticker, "ticker"
    other = _attr(identifiers, "other", "value")
    if not other:
        raise ValueError(f"No identifier found for holding {_text(holding, 'name')!r}")
    return other, _attr(identifiers, "other", "otherDesc").lower()


def parse_single_submission(root: ET.Element, filing_date: str) -> Index:
    """Build an :class:`Index` from an N-PORT ``edgarSubmission`` document."""

    if _local_name(root.tag) != "edgarSubmission":
        raise ValueError(f"Unexpected root element {_local_name(root.tag)!r}")
    form_data = _child(root, "formData")
    gen_info = _child(form_data, "genInfo")
    index = Index(_text(gen_info, "seriesName"), _text(gen_info, "seriesId"), filing_date)

    for holding in _children(_child(form_data, "invstOrSecs"), "invstOrSec"):
        if _is_derivative(holding):
            continue
        # Contracts should be covered by the derivative checks above.
        if _attr(_child(holding, "identifiers"), "other", "otherDesc") in IGNORED_OTHER_DESCRIPTIONS:
            continue
        identifier, id_type = _identifier(holding)
        weight = float(_text(holding, "pctVal") or 0)
        index.components.append(
            IndexComponent(_text(holding, "name"), identifier, id_type, weight)
        )

    index.components.sort(key=lambda component: (-component.weight, component.id))
    return index


def fetch_all_submissions(client: "EdgarClient", cik: int) -> list[SubmissionInfo]:
    """Fetch the N-PORT submissions of ``cik``, newest first."""

    url = ALL_SUBMISSIONS_URL.format(cik=cik)
    logger.info("Querying all submissions: %s", url)
    return client.get_json(url, into=lambda payload: parse_all_submissions(payload, cik))


def fetch_single_submission(client: "EdgarClient", info: SubmissionInfo) -> Index:
    """Fetch and decode the filing described by ``info``."""

    logger.info("Querying single submission: %s", info.url)
    index = client.get_xml(
        info.url, into=lambda root: parse_single_submission(root, info.filing_date)
    )
    logger.info(
        "Fetched single submission for %s (series_id=%s, filing_date=%s)",
        index.name,
        index.series_id,
        index.filing_date,
    )
    return index
