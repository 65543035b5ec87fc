"""Cut an oversized backlog of submissions into a batch that fits the fetch quota."""

from __future__ import annotations

import logging
from typing import Sequence

from .client import EdgarClient
from .exceptions import BoundaryNotFoundError
from .submissions import SubmissionInfo

logger = logging.getLogger(__name__)


def find_boundary(backlog: Sequence[SubmissionInfo], limit: int) -> int | None:
    """Return the largest cut index ``<= limit`` between two filing dates.

    A cut index ``i`` keeps ``backlog[:i]`` and is valid only when
    ``backlog[i - 1]`` and ``backlog[i]`` were filed on different dates.
    """

    boundary = None
    for i in range(1, min(limit, len(backlog) - 1) + 1):
        if backlog[i - 1].filing_date != backlog[i].filing_date:
            boundary = i
    return boundary


def select_batch(
    backlog: Sequence[SubmissionInfo], client: EdgarClient
) -> list[SubmissionInfo]:
    """
    Select the prefix of ``backlog`` to fetch before the client must sleep.

    Submissions filed on the same day are never split across batches. When
    the remaining quota holds no date boundary, the client sleeps once to
    replenish it and the search is repeated.

    Args:
        backlog: Submissions ordered from newest to oldest filing date
        client: Client whose remaining quota bounds the batch

    Returns:
        The submissions to fetch now; the rest is left for a later run

    Raises:
        BoundaryNotFoundError: A single filing date holds more submissions
            than a full quota
    """
    for attempt in range(2):
        remaining = client.remaining_fetches_before_sleep
        if len(backlog) <= remaining:
            return list(backlog)

        if attempt == 0:
            logger.info(
                "Too many submissions to fetch: %d (remaining %d). Finding a suitable boundary.",
                len(backlog),
                remaining,
            )
        boundary = find_boundary(backlog, remaining)
        if boundary is not None:
            batch = list(backlog[:boundary])
            logger.info(
                "Will fetch: %d (limit %d), filing_date in [%s,%s].",
                len(batch),
                remaining,
                batch[-1].filing_date,
                batch[0].filing_date,
            )
            return batch

        if attempt == 0:
            logger.info("Can't find a suitable boundary, sleeping until the fetch limit resets.")
            client.sleep()

    raise BoundaryNotFoundError(
        f"No filing_date boundary within {client.remaining_fetches_before_sleep} "
        "fetches even after the fetch limit reset"
    )
