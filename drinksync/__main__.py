"""
Drinksync: keep the drink image records in DynamoDB in sync with the images stored in S3
"""

import argparse
import asyncio
import inspect
import json
import logging
import sys
from pathlib import Path

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from drinksync.config import ENV_PREFIX, get_settings, validate_settings
from drinksync.connections import drinksync_connections
from drinksync.models import BatchResult, NotificationItem
from drinksync.repository import MemoryDrinkImageRepository
from drinksync.service import create_ingest_loop, setup_logging
from drinksync.tracing import NullTracer


def run(args):
    settings = get_settings()
    logging.info(f"Starting server at port {args.port}, debug={not args.nodebug}, table={settings.table_name}")
    if not settings.sns_topic_arn:
        logging.warning("Warning: No SNS topic set up - messages from any topic posted to this service will be processed")
    if validate_settings():
        logging.warning(validate_settings())
    logging.info(
        "To change server config, create an .env file and/or set environment parameters,\n"
        f"{' ' * 26}see drinksync/config.py for more information.\n"
    )
    log_config = "logging.yml" if Path("logging.yml").exists() else LOGGING_CONFIG
    uvicorn.run("drinksync.api:app", host="0.0.0.0", reload=not args.nodebug, port=int(args.port), log_config=log_config)


def print_result(result: BatchResult):
    for r in result.items:
        target = f"{r.bar_name}/{r.drink_name}" if r.bar_name else "-"
        print(f"{r.outcome.value:15} s3://{r.item.bucket}/{r.item.key} {target} {r.error or ''}".rstrip())
    print(f"{result.succeeded} succeeded, {result.failed} failed, {result.skipped} skipped")


async def _process(args, event=None, items=None) -> BatchResult:
    if args.dry_run:
        loop = create_ingest_loop(repository=MemoryDrinkImageRepository(), tracer=NullTracer())
        return await (loop.process(event) if event is not None else loop.process_items(items))
    async with drinksync_connections():
        loop = create_ingest_loop()
        return await (loop.process(event) if event is not None else loop.process_items(items))


async def reconcile(args):
    item = NotificationItem(bucket=args.bucket, key=args.key)
    result = await _process(args, items=[item])
    print_result(result)
    if result.failed:
        sys.exit(1)


async def replay(args):
    if args.file == "-":
        event = json.load(sys.stdin)
    else:
        with open(args.file) as f:
            event = json.load(f)
    result = await _process(args, event=event)
    print_result(result)
    if result.failed:
        sys.exit(1)


def config(_args):
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")


def main():
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m drinksync")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("run", help="Run the SNS notification endpoint")
    p.add_argument(
        "--no-debug",
        action="store_true",
        dest="nodebug",
        help="Disable debug mode (no auto-reload)",
    )
    p.add_argument("-p", "--port", help="Port", default=5000)
    p.set_defaults(func=run)

    p = subparsers.add_parser("reconcile", help="Reconcile the record for a single stored object")
    p.add_argument("bucket", help="Name of the S3 bucket")
    p.add_argument("key", help="Object key, e.g. mojito-bar/margarita.png")
    p.add_argument("--dry-run", action="store_true", help="Use an empty in-memory store instead of DynamoDB")
    p.set_defaults(func=reconcile)

    p = subparsers.add_parser("replay", help="Process a saved SNS or S3 event (JSON file, or - for stdin)")
    p.add_argument("file", help="The event JSON file")
    p.add_argument("--dry-run", action="store_true", help="Use an empty in-memory store instead of DynamoDB")
    p.set_defaults(func=replay)

    p = subparsers.add_parser("config", help="Show the current drinksync settings")
    p.set_defaults(func=config)

    args = parser.parse_args()

    setup_logging()

    if inspect.iscoroutinefunction(args.func):
        asyncio.run(args.func(args))
    else:
        args.func(args)


if __name__ == "__main__":
    main()
