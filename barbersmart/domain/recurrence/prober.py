"""
Availability probing for a series of recurring dates.

Checks run in fixed-size batches: every check in a batch is started
together, and the next batch only starts once all of them have settled.
A failing or timed-out check marks its own date unavailable instead of
aborting the probe.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

from ...config import PROBE_BATCH_SIZE, PROBE_CHECK_TIMEOUT_SECONDS
from .rules import GeneratedDate

logger = logging.getLogger(__name__)

REASON_CHECK_FAILED = "check failed"
REASON_CHECK_TIMED_OUT = "check timed out"


@dataclass(frozen=True)
class ProbeResult:
    available: bool
    reason: Optional[str] = None
    checking: bool = False


CheckFn = Callable[[Any, str], Awaitable[Any]]
ProgressFn = Callable[[dict[str, ProbeResult]], Any]


def _as_probe_result(outcome: Any) -> ProbeResult:
    """Accept anything with ``available``/``reason``, as an object or a mapping"""
    if isinstance(outcome, Mapping):
        return ProbeResult(available=bool(outcome.get("available")), reason=outcome.get("reason"))
    return ProbeResult(available=bool(outcome.available), reason=getattr(outcome, "reason", None))


async def _run_check(
    check_fn: CheckFn, generated: GeneratedDate, time: str, timeout: Optional[float]
) -> ProbeResult:
    try:
        call = check_fn(generated.date, time)
        outcome = await asyncio.wait_for(call, timeout=timeout) if timeout else await call
        return _as_probe_result(outcome)
    except asyncio.TimeoutError:
        logger.warning(f"⏰ Availability check for {generated.formatted_key} {time} timed out")
        return ProbeResult(available=False, reason=REASON_CHECK_TIMED_OUT)
    except Exception as e:
        logger.warning(f"⚠️ Availability check for {generated.formatted_key} {time} failed: {e}")
        return ProbeResult(available=False, reason=REASON_CHECK_FAILED)


async def probe_all(
    dates: Sequence[GeneratedDate],
    time: str,
    check_fn: CheckFn,
    batch_size: int = PROBE_BATCH_SIZE,
    timeout: Optional[float] = PROBE_CHECK_TIMEOUT_SECONDS,
    on_progress: Optional[ProgressFn] = None,
) -> dict[str, ProbeResult]:
    """
    Check every date at ``time`` and return results keyed by ``YYYY-MM-DD``.

    ``on_progress`` receives a copy of the results after every batch, with
    dates not reached yet still marked ``checking``. It may be sync or async.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    results = {d.formatted_key: ProbeResult(available=True, checking=True) for d in dates}
    logger.info(f"🔍 Probing {len(dates)} dates at {time} in batches of {batch_size}")

    for offset in range(0, len(dates), batch_size):
        batch = dates[offset : offset + batch_size]
        outcomes = await asyncio.gather(*(_run_check(check_fn, d, time, timeout) for d in batch))
        for generated, outcome in zip(batch, outcomes):
            results[generated.formatted_key] = outcome

        logger.debug(f"Batch {offset // batch_size + 1} settled ({offset + len(batch)}/{len(dates)})")
        if on_progress is not None:
            published = on_progress(dict(results))
            if inspect.isawaitable(published):
                await published

    available = sum(1 for r in results.values() if r.available)
    logger.info(f"✅ Probe finished: {available}/{len(results)} dates available")
    return results
