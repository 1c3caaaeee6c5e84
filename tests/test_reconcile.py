import pytest

from drinksync.models import DrinkImage, ItemOutcome, NotificationItem
from drinksync.reconcile import TRACE_LABEL, Reconciler
from drinksync.repository import MemoryDrinkImageRepository
from tests.tools import BrokenRepository

URL = "https://bar-bucket.s3.amazonaws.com/mojito-bar/margarita.png"
ITEM = NotificationItem(bucket="bar-bucket", key="mojito-bar/margarita.png")


@pytest.mark.anyio
async def test_first_sighting(reconciler, repository):
    result = await reconciler.reconcile(ITEM)
    assert result.outcome == ItemOutcome.INSERTED
    assert (result.bar_name, result.drink_name, result.s3_object_url) == ("mojito-bar", "margarita", URL)
    assert list(repository.records.values()) == [DrinkImage(bar_name="mojito-bar", drink_name="margarita", s3_object_url=URL)]


@pytest.mark.anyio
async def test_update_existing(tracer):
    repository = MemoryDrinkImageRepository(
        [DrinkImage(bar_name="mojito-bar", drink_name="margarita", s3_object_url="https://old/margarita.jpg")]
    )
    result = await Reconciler(repository, tracer).reconcile(ITEM)
    assert result.outcome == ItemOutcome.UPDATED
    assert list(repository.records.keys()) == [("mojito-bar", "margarita")]
    assert repository.records["mojito-bar", "margarita"].s3_object_url == URL


@pytest.mark.anyio
async def test_idempotent(reconciler, repository):
    await reconciler.reconcile(ITEM)
    once = dict(repository.records)
    result = await reconciler.reconcile(ITEM)
    assert result.outcome == ItemOutcome.UPDATED
    assert repository.records == once


@pytest.mark.anyio
async def test_malformed(reconciler, repository, tracer):
    result = await reconciler.reconcile(NotificationItem(bucket="bar-bucket", key="margarita.png"))
    assert result.outcome == ItemOutcome.MALFORMED_PATH
    assert "margarita.png" in result.error
    assert repository.records == {}
    # the store is never touched
    assert tracer.names == []


@pytest.mark.anyio
async def test_lookup_failure(tracer):
    result = await Reconciler(BrokenRepository("find"), tracer).reconcile(ITEM)
    assert result.outcome == ItemOutcome.LOOKUP_FAILED
    assert result.error == "connection refused"
    assert result.bar_name == "mojito-bar"


@pytest.mark.anyio
async def test_write_failures(tracer):
    repository = BrokenRepository("insert")
    result = await Reconciler(repository, tracer).reconcile(ITEM)
    assert result.outcome == ItemOutcome.WRITE_FAILED
    assert repository.records == {}

    existing = DrinkImage(bar_name="mojito-bar", drink_name="margarita", s3_object_url="old")
    repository = BrokenRepository("update", records=[existing])
    result = await Reconciler(repository, tracer).reconcile(ITEM)
    assert result.outcome == ItemOutcome.WRITE_FAILED
    assert result.error == "update failed"
    assert repository.records["mojito-bar", "margarita"].s3_object_url == "old"


@pytest.mark.anyio
async def test_traces_each_store_call(reconciler, tracer):
    await reconciler.reconcile(ITEM)
    assert tracer.names == [TRACE_LABEL, TRACE_LABEL]


@pytest.mark.anyio
async def test_url_template(repository):
    reconciler = Reconciler(repository, url_template="s3://{bucket}/{key}")
    result = await reconciler.reconcile(ITEM)
    assert result.s3_object_url == "s3://bar-bucket/mojito-bar/margarita.png"
