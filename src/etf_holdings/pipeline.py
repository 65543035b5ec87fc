"""Resumable fetch passes over every company of the ETF catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .batching import select_batch
from .client import EdgarClient
from .exceptions import DecodeError, FetchError
from .progress import progress_bar
from .spans import DateSpan, FetchedDates, filter_filing_dates
from .storage import DEFAULT_DATA_DIR, EtfCatalog, load_histories, merge_index, write_histories
from .submissions import fetch_all_submissions, fetch_single_submission
from .validation import validate_index

logger = logging.getLogger(__name__)

FETCHED_MAP_FILENAME = "fetched_map.json"


@dataclass
class PassResult:
    """Outcome of one company's fetch pass."""

    cik: int
    scheduled: int = 0
    stored: int = 0
    unmapped: int = 0
    undecodable: int = 0
    failed: int = 0
    span: DateSpan | None = None

    @property
    def complete(self) -> bool:
        """A pass is complete when every scheduled request got an answer."""
        return self.failed == 0


def process_company(
    client: EdgarClient,
    cik: int,
    catalog: EtfCatalog,
    fetched_dates: FetchedDates,
    data_dir: Path | str = DEFAULT_DATA_DIR,
    *,
    show_progress: bool = True,
    use_notebook: bool | None = None,
) -> PassResult:
    """
    Fetch the filings of ``cik`` not covered by its recorded span.

    Args:
        client: Client shared by every pass of the run
        cik: Company to process
        catalog: Known ETFs used to validate and route indexes
        fetched_dates: Recorded spans, saved when the pass completes
        data_dir: Root of the ``all/`` and ``latest/`` histories
        show_progress: Display a tqdm progress bar
        use_notebook: Force the notebook progress bar on or off

    Returns:
        Counters describing the pass
    """
    result = PassResult(cik)
    span = fetched_dates.get(cik, DateSpan())
    # Stored files are only trusted when a span says what they cover.
    histories = {} if span.is_empty() else load_histories(data_dir, catalog.etfs_for(cik))

    try:
        submissions = fetch_all_submissions(client, cik)
    except (FetchError, DecodeError) as exc:
        logger.error("Error fetching/parsing all submissions for cik=%d: %s", cik, exc)
        result.failed += 1
        return result

    submissions = filter_filing_dates(submissions, span)
    if not submissions:
        logger.info("Nothing to fetch for cik=%d. Skipping to the next CIK", cik)
        result.span = span
        return result

    batch = select_batch(submissions, client)
    result.scheduled = len(batch)

    progress = progress_bar(
        len(batch),
        f"Fetching cik={cik}",
        enabled=show_progress,
        use_notebook=use_notebook,
    )
    try:
        for info in batch:
            if progress is not None:
                progress.update(1)
            try:
                index = fetch_single_submission(client, info)
            except FetchError as exc:
                logger.error("Error fetching submission %s: %s", info, exc)
                result.failed += 1
                continue
            except DecodeError as exc:
                logger.error("Error parsing submission %s: %s", info, exc)
                result.undecodable += 1
                continue

            validation = validate_index(cik, index, catalog)
            validation.report(logger)
            if not validation.etf_name:
                result.unmapped += 1
                continue
            histories[validation.etf_name] = merge_index(
                histories.get(validation.etf_name, []), index
            )
            result.stored += 1
    finally:
        if progress is not None:
            progress.close()

    write_histories(data_dir, histories)

    if not result.complete:
        logger.warning(
            "%d submissions failed for cik=%d, keeping its fetched span at %s",
            result.failed,
            cik,
            span,
        )
        result.span = span
        return result

    result.span = fetched_dates.extend(cik, batch[0].filing_date, batch[-1].filing_date)
    fetched_dates.save()
    logger.info("Recorded fetched span [%s,%s] for cik=%d", result.span.start, result.span.end, cik)
    return result


def run_fetch(
    client: EdgarClient,
    catalog: EtfCatalog,
    data_dir: Path | str = DEFAULT_DATA_DIR,
    *,
    fetched_map_path: Path | str | None = None,
    show_progress: bool = True,
    use_notebook: bool | None = None,
) -> dict[int, PassResult]:
    """Run one fetch pass per company of ``catalog``, in catalog order."""

    data_dir = Path(data_dir)
    (data_dir / "all").mkdir(parents=True, exist_ok=True)
    (data_dir / "latest").mkdir(parents=True, exist_ok=True)
    fetched_dates = FetchedDates.load(fetched_map_path or data_dir / FETCHED_MAP_FILENAME)
    logger.info("Fetched dates: %s", dict(fetched_dates))

    results: dict[int, PassResult] = {}
    for cik in catalog.ciks:
        results[cik] = process_company(
            client,
            cik,
            catalog,
            fetched_dates,
            data_dir,
            show_progress=show_progress,
            use_notebook=use_notebook,
        )
    return results
