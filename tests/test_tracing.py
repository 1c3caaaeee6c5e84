import asyncio
import re

import pytest

from drinksync.models import ItemOutcome, NotificationItem
from drinksync.reconcile import Reconciler
from drinksync.repository import MemoryDrinkImageRepository
from drinksync.tracing import NullTracer, XRayTracer, current_trace_id, new_trace_id, segment_document
from tests.tools import FakeXRay, client_error

TRACE_ID_PATTERN = r"^1-[0-9a-f]{8}-[0-9a-f]{24}$"


def test_trace_ids():
    assert re.match(TRACE_ID_PATTERN, new_trace_id())
    header = "Root=1-5759e988-bd862e3fe1be46a994272793;Parent=53995c3f42cd8ad8;Sampled=1"
    assert current_trace_id({"_X_AMZN_TRACE_ID": header}) == "1-5759e988-bd862e3fe1be46a994272793"
    assert re.match(TRACE_ID_PATTERN, current_trace_id({}))
    assert re.match(TRACE_ID_PATTERN, current_trace_id({"_X_AMZN_TRACE_ID": "Parent=53995c3f42cd8ad8"}))


def test_segment_document():
    doc = segment_document("DynamoDB Interaction", "1-5759e988-bd862e3fe1be46a994272793")
    assert doc["name"] == "DynamoDB Interaction"
    assert doc["trace_id"] == "1-5759e988-bd862e3fe1be46a994272793"
    assert re.match(r"^[0-9a-f]{16}$", doc["id"])
    assert doc["end_time"] >= doc["start_time"]


@pytest.mark.anyio
async def test_xray_tracer_submits():
    client = FakeXRay()
    tracer = XRayTracer(client, trace_id="1-5759e988-bd862e3fe1be46a994272793")
    tracer.trace("a")
    tracer.trace("b")
    await tracer.flush()
    assert [d["name"] for d in client.documents] == ["a", "b"]
    assert {d["trace_id"] for d in client.documents} == {"1-5759e988-bd862e3fe1be46a994272793"}
    assert not tracer.pending


@pytest.mark.anyio
async def test_xray_failure_does_not_affect_reconciliation():
    tracer = XRayTracer(FakeXRay(error=client_error("AccessDeniedException", "PutTraceSegments")))
    repository = MemoryDrinkImageRepository()
    result = await Reconciler(repository, tracer).reconcile(
        NotificationItem(bucket="bar-bucket", key="mojito-bar/margarita.png")
    )
    await tracer.flush()
    assert result.outcome == ItemOutcome.INSERTED
    assert ("mojito-bar", "margarita") in repository.records


@pytest.mark.anyio
async def test_xray_slow_segments_are_dropped():
    tracer = XRayTracer(FakeXRay(delay=10))
    tracer.trace("slow")
    await tracer.flush(timeout=0.01)
    # give the cancelled task a chance to finish
    await asyncio.sleep(0.05)
    assert not tracer.pending


@pytest.mark.anyio
async def test_null_tracer():
    tracer = NullTracer()
    tracer.trace("nothing")
    await tracer.flush()
