"""Paced, fire-and-forget dispatch of many gh calls.

Marking dozens of threads read one request at a time is slow, and firing
them all at once trips GitHub's secondary rate limits. Calls are launched in
batches without waiting for them, with a short pause between batches.
Nothing is collected from the launched processes: the remote updates are
idempotent, and the next reload shows what actually changed.
"""

import time
from collections.abc import Callable, Sequence
from typing import Any

from .. import gh
from ..log import get_logger

BATCH_SIZE = 30
BATCH_DELAY = 0.3

_log = get_logger("dispatch")


def dispatch_batches(
    calls: Sequence[list[str]],
    launch: Callable[[list[str]], Any] = gh.launch,
    batch_size: int = BATCH_SIZE,
    delay: float = BATCH_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Launch every call, batch_size at a time, pausing between batches.

    Returns the number of batches launched.
    """
    batches = 0
    for start in range(0, len(calls), batch_size):
        if batches:
            sleep(delay)
        for args in calls[start : start + batch_size]:
            launch(args)
        batches += 1

    _log.info("dispatched %d calls in %d batches", len(calls), batches)
    return batches
