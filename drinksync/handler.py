"""
AWS Lambda entrypoint, subscribed to the SNS topic that fans out the S3 object-created notifications.

Configure the function with handler `drinksync.handler.lambda_handler`.
"""

import asyncio
import logging
from typing import Any

from drinksync.connections import drinksync_connections
from drinksync.errors import BootstrapError
from drinksync.models import BatchResult
from drinksync.service import create_ingest_loop, setup_logging


async def handle_event(event: dict[str, Any]) -> BatchResult:
    async with drinksync_connections():
        loop = create_ingest_loop()
        return await loop.process(event)


def lambda_handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """
    Reconcile all drink images in the event.

    The invocation succeeds once every item was attempted, also if some of them failed:
    those are logged and listed in the returned summary. Only a failure to set up
    the clients fails the invocation (and lets SNS retry the delivery).
    """
    try:
        setup_logging()
    except ValueError as e:
        raise BootstrapError(f"Invalid settings: {e}") from e
    request_id = getattr(context, "aws_request_id", None)
    logging.info(f"Handling {len(event.get('Records') or [])} notification record(s), request {request_id}")
    result = asyncio.run(handle_event(event))
    return result.model_dump(mode="json")
