"""Business-rule checks for decoded indexes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .storage import EtfCatalog
from .submissions import Index

KNOWN_ID_TYPES = frozenset({"isin", "ticker", "sedol", "faid", "cins", "cusip", "vid"})
MISSING_VALUES = ("", "N/A")


@dataclass
class ValidationResult:
    """Errors and warnings found for one index.

    ``etf_name`` is empty when the index does not map to a known ETF.
    """

    etf_name: str = ""
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    @property
    def ok(self) -> bool:
        return not self.errors and not self.warnings

    def report(self, logger: logging.Logger) -> None:
        """Log the findings, staying silent when there are none."""

        if self.ok:
            return
        logger.warning("Validation report for %s", self.etf_name or "<unknown ETF>")
        for error in self.errors:
            logger.error("  %s", error)
        for warning in self.warnings:
            logger.warning("  %s", warning)


def validate_index(cik: int, index: Index, catalog: EtfCatalog) -> ValidationResult:
    """Check ``index`` against the catalog and the component invariants."""

    result = ValidationResult()
    if index.name in MISSING_VALUES:
        result.add_error("Index is missing name")
    if not index.series_id:
        result.add_error(f"Index {index.name} is missing seriesId")

    etf_name = catalog.etf_name(cik, index.series_id)
    if etf_name is None:
        result.add_warning(f"Index {index.name} doesn't have a corresponding ETF in our map")
    elif not etf_name:
        result.add_error(f"Empty name in our map for index {index.name}")
    result.etf_name = etf_name or ""

    # Component checks are only meaningful once the index itself is sound.
    if not result.ok:
        return result

    for component in index.components:
        label = f"name={component.name}, id={component.id}"
        if component.name in MISSING_VALUES:
            result.add_error(f"ETF {result.etf_name} has a component with no name, {label}")
        if component.id in MISSING_VALUES:
            result.add_error(f"ETF {result.etf_name} has a component with no id, {label}")
        if component.id_type in MISSING_VALUES:
            result.add_error(f"ETF {result.etf_name} has a component with no id_type, {label}")
        elif component.id_type not in KNOWN_ID_TYPES:
            result.add_warning(
                f"ETF {result.etf_name} has a component with an unknown id_type, "
                f"{label}, id_type={component.id_type}"
            )
        if component.weight < 0:
            result.add_error(f"ETF {result.etf_name} has a component with negative weight, {label}")
    return result
