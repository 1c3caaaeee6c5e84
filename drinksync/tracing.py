"""
Best-effort AWS X-Ray trace segments around the DynamoDB interactions.

Submitting a segment never blocks or fails the reconciliation: segments are sent from background tasks,
errors are logged and dropped, and whatever is still pending at the end of a batch gets a short grace period.
"""

import asyncio
import json
import logging
import os
import secrets
import time
from typing import Any, Protocol

LAMBDA_TRACE_HEADER = "_X_AMZN_TRACE_ID"
FLUSH_TIMEOUT_SECONDS = 2.0


class Tracer(Protocol):
    def trace(self, name: str) -> None: ...

    async def flush(self, timeout: float = FLUSH_TIMEOUT_SECONDS) -> None: ...


class NullTracer:
    """Tracer used when X-Ray is disabled"""

    def trace(self, name: str) -> None:
        pass

    async def flush(self, timeout: float = FLUSH_TIMEOUT_SECONDS) -> None:
        pass


def new_trace_id() -> str:
    """A trace id in the X-Ray format: version, hex epoch seconds, 96 random bits"""
    return f"1-{int(time.time()):08x}-{secrets.token_hex(12)}"


def current_trace_id(environ=None) -> str:
    """
    The root trace id of the running Lambda invocation (from the _X_AMZN_TRACE_ID variable,
    e.g. Root=1-5759e988-bd862e3fe1be46a994272793;Parent=53995c3f42cd8ad8;Sampled=1),
    or a fresh trace id outside of Lambda.
    """
    header = (environ if environ is not None else os.environ).get(LAMBDA_TRACE_HEADER, "")
    for part in header.split(";"):
        name, _, value = part.strip().partition("=")
        if name == "Root" and value:
            return value
    return new_trace_id()


def segment_document(name: str, trace_id: str) -> dict[str, Any]:
    now = time.time()
    return {
        "name": name,
        "trace_id": trace_id,
        "id": secrets.token_hex(8),
        "start_time": now,
        "end_time": now,
    }


class XRayTracer:
    def __init__(self, client: Any, trace_id: str | None = None):
        self.client = client
        self.trace_id = trace_id or current_trace_id()
        self.pending: set[asyncio.Task] = set()

    def trace(self, name: str) -> None:
        """Schedule a segment submission and return immediately"""
        task = asyncio.create_task(self._submit(name))
        self.pending.add(task)
        task.add_done_callback(self.pending.discard)

    async def _submit(self, name: str) -> None:
        document = segment_document(name, self.trace_id)
        try:
            res = await self.client.put_trace_segments(TraceSegmentDocuments=[json.dumps(document)])
        except Exception as e:
            logging.warning(f"Could not submit trace segment {name!r}: {e}")
            return
        if unprocessed := res.get("UnprocessedTraceSegments"):
            logging.warning(f"X-Ray did not process trace segment {name!r}: {unprocessed}")

    async def flush(self, timeout: float = FLUSH_TIMEOUT_SECONDS) -> None:
        if not self.pending:
            return
        done, not_done = await asyncio.wait(set(self.pending), timeout=timeout)
        for task in not_done:
            task.cancel()
        if not_done:
            logging.warning(f"Dropped {len(not_done)} trace segment(s) that were not sent within {timeout}s")
