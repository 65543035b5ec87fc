"""tqdm progress bars for long fetch passes."""

from __future__ import annotations

from typing import Any

from tqdm import auto, notebook, std


def progress_bar(
    total: int | None,
    desc: str,
    *,
    enabled: bool = True,
    use_notebook: bool | None = None,
    unit: str = "filing",
) -> Any | None:
    """Open a progress bar, or return ``None`` when progress is disabled.

    ``use_notebook`` forces the Jupyter widget on or off; by default
    :mod:`tqdm.auto` chooses. Sleeps of the fetch limit can last minutes, so
    the bar refreshes on every update rather than on a time interval.
    """

    if not enabled:
        return None
    if use_notebook is None:
        factory = auto.tqdm
    else:
        factory = notebook.tqdm if use_notebook else std.tqdm
    return factory(
        total=total,
        desc=desc,
        unit=unit,
        dynamic_ncols=True,
        mininterval=0,
        leave=False,
    )
