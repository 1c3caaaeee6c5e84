import pytest
from httpx import ASGITransport, AsyncClient

from drinksync import api
from drinksync.api.notifications import get_ingest_loop
from drinksync.ingest import IngestLoop
from drinksync.reconcile import Reconciler
from drinksync.repository import MemoryDrinkImageRepository
from tests.tools import RecordingTracer


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def repository():
    return MemoryDrinkImageRepository()


@pytest.fixture()
def tracer():
    return RecordingTracer()


@pytest.fixture()
def reconciler(repository, tracer):
    return Reconciler(repository, tracer)


@pytest.fixture()
def loop(reconciler):
    return IngestLoop(reconciler)


@pytest.fixture()
async def client(loop):
    """API client that processes notifications into the in-memory repository"""
    api.app.dependency_overrides[get_ingest_loop] = lambda: loop
    try:
        async with AsyncClient(transport=ASGITransport(app=api.app), base_url="http://test") as client:
            yield client
    finally:
        api.app.dependency_overrides.clear()
