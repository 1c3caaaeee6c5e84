"""Wiring of the ingest loop to the configured AWS clients, shared by the lambda handler, the API and the CLI."""

import logging

from drinksync.config import get_settings
from drinksync.connections import dynamodb, xray
from drinksync.ingest import IngestLoop
from drinksync.reconcile import Reconciler
from drinksync.repository import DrinkImageRepository, DynamoDBDrinkImageRepository
from drinksync.tracing import NullTracer, Tracer, XRayTracer

LOG_FORMAT = "[%(levelname)-7s:%(name)-15s] %(message)s"


def setup_logging(level: str | None = None) -> None:
    level = level or get_settings().log_level
    # On AWS Lambda the root logger already has a handler, so basicConfig will not set the level
    logging.basicConfig(format=LOG_FORMAT, level=level)
    logging.getLogger().setLevel(level)
    for name in ("botocore", "aiobotocore", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def create_tracer() -> Tracer:
    client = xray()
    if client is None:
        return NullTracer()
    return XRayTracer(client)


def create_ingest_loop(repository: DrinkImageRepository | None = None, tracer: Tracer | None = None) -> IngestLoop:
    """
    Build an ingest loop on the started connections (see drinksync.connections.drinksync_connections).
    Pass a repository or tracer to use those instead, e.g. for a dry run.
    """
    settings = get_settings()
    if repository is None:
        repository = DynamoDBDrinkImageRepository(dynamodb(), settings.table_name)
    if tracer is None:
        tracer = create_tracer()
    return IngestLoop(Reconciler(repository, tracer, url_template=settings.object_url_template))
