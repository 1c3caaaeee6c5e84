import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any, AsyncGenerator

from aiobotocore.config import AioConfig
from aiobotocore.session import get_session
from botocore.exceptions import BotoCoreError, ClientError

from drinksync.config import get_settings
from drinksync.errors import BootstrapError


class DrinksyncConnections:
    dynamodb: Any | None
    xray: Any | None
    context_stack: AsyncExitStack | None

    def __init__(self, dynamodb: Any | None = None, xray: Any | None = None, context_stack: AsyncExitStack | None = None):
        self.dynamodb = dynamodb
        self.xray = xray
        self.context_stack = context_stack


CONNECTIONS = DrinksyncConnections()


@asynccontextmanager
async def drinksync_connections() -> AsyncGenerator[None, None]:
    """
    The main context manager to start and stop the AWS clients used by drinksync.
    Use it once per invocation or process:
        - For the lambda handler: around the processing of one event
        - For running the server: in the FastAPI lifespan
        - For CLI commands: within the CLI command
    """
    try:
        await start_connections()
        yield
    finally:
        await close_connections()


def dynamodb() -> Any:
    """
    Use this function to access the DynamoDB client.
    """
    if CONNECTIONS.dynamodb is None:
        raise ConnectionError("DynamoDB client not started")
    return CONNECTIONS.dynamodb


def xray() -> Any | None:
    """
    The X-Ray client, or None if tracing is disabled.
    """
    return CONNECTIONS.xray


def aws_config() -> AioConfig:
    settings = get_settings()
    return AioConfig(
        connect_timeout=settings.aws_connect_timeout,
        read_timeout=settings.aws_read_timeout,
        retries={"max_attempts": settings.aws_max_attempts, "mode": "standard"},
    )


async def start_connections() -> None:
    """
    Create the AWS clients. Any failure here is a BootstrapError: without a store client
    there is no point in looking at the notifications.
    """
    if CONNECTIONS.context_stack is not None:
        return
    try:
        settings = get_settings()
    except ValueError as e:
        raise BootstrapError(f"Invalid settings: {e}") from e

    stack = AsyncExitStack()
    session = get_session()
    try:
        logging.debug(
            f"Connecting with DynamoDB table {settings.table_name} in {settings.aws_region} "
            f"at {settings.dynamodb_endpoint or 'the AWS endpoint'}"
        )
        client = session.create_client(
            "dynamodb",
            region_name=settings.aws_region,
            endpoint_url=settings.dynamodb_endpoint,
            config=aws_config(),
        )
        CONNECTIONS.dynamodb = await stack.enter_async_context(client)

        if settings.xray_enabled:
            client = session.create_client(
                "xray",
                region_name=settings.aws_region,
                endpoint_url=settings.xray_endpoint,
                config=aws_config(),
            )
            CONNECTIONS.xray = await stack.enter_async_context(client)
    except (BotoCoreError, ClientError, ValueError) as e:
        await stack.aclose()
        CONNECTIONS.dynamodb = None
        CONNECTIONS.xray = None
        raise BootstrapError(f"Cannot create AWS clients: {e}") from e

    CONNECTIONS.context_stack = stack


async def close_connections() -> None:
    if CONNECTIONS.context_stack is not None:
        await CONNECTIONS.context_stack.aclose()
    CONNECTIONS.context_stack = None
    CONNECTIONS.dynamodb = None
    CONNECTIONS.xray = None
