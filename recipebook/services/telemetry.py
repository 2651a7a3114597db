from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from fastapi.concurrency import run_in_threadpool
from supabase import Client

from .types import ModelAttempt

logger = logging.getLogger(__name__)

DEFAULT_TELEMETRY_TABLE = "model_attempts"

_pending: set[asyncio.Task] = set()


class TelemetrySink(Protocol):
    async def record(self, attempt: ModelAttempt) -> None:
        ...


class LoggingTelemetrySink:
    async def record(self, attempt: ModelAttempt) -> None:
        logger.info(
            "model.attempt model=%s index=%d fallback=%s success=%s latency_ms=%.1f error=%s",
            attempt.model,
            attempt.index,
            attempt.is_fallback,
            attempt.success,
            attempt.latency_ms,
            attempt.error,
        )


class SupabaseTelemetrySink:
    def __init__(self, supa: Client, table: str = DEFAULT_TELEMETRY_TABLE) -> None:
        self._supa = supa
        self._table = table

    def _insert(self, event: dict) -> None:
        self._supa.table(self._table).insert(event).execute()

    async def record(self, attempt: ModelAttempt) -> None:
        await run_in_threadpool(self._insert, attempt.to_event())


def _on_done(task: asyncio.Task) -> None:
    _pending.discard(task)
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.warning("telemetry.write_fail error=%s", error)


def emit_detached(sink: TelemetrySink, attempt: ModelAttempt) -> asyncio.Task | None:
    """Schedule ``sink.record(attempt)`` without waiting for it.

    The task is kept referenced until it finishes; failures are only logged.
    """
    try:
        loop = asyncio.get_running_loop()
    except RuntimeError as error:
        logger.warning("telemetry.schedule_fail error=%s", error)
        return None
    task = loop.create_task(sink.record(attempt))
    _pending.add(task)
    task.add_done_callback(_on_done)
    return task


async def drain_pending() -> None:
    """Wait for outstanding telemetry writes, e.g. on shutdown."""
    loop = asyncio.get_running_loop()
    tasks = [task for task in _pending if task.get_loop() is loop]
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)
