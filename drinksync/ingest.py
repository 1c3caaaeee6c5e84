"""
Turn notification batches into reconciliation work.

A batch is a dict with a list of `Records`. Each record can carry an S3 event directly (`record["s3"]`),
or be an SNS record whose message is an S3 event notification in JSON, which again has `Records`.
Anything else (other notification types, S3 test events, object removals) is skipped silently.
"""

import json
import logging
from typing import Any, Iterable
from urllib.parse import unquote_plus

from pydantic import ValidationError

from drinksync.models import BatchResult, NotificationItem
from drinksync.reconcile import Reconciler

S3_TEST_EVENT = "s3:TestEvent"


def _s3_items(records: Iterable[Any]) -> Iterable[NotificationItem | None]:
    """Yield an item per S3 record, or None for records that are not a usable object creation"""
    for record in records:
        if not isinstance(record, dict) or not isinstance(s3 := record.get("s3"), dict):
            yield None
            continue
        event_name = record.get("eventName")
        if event_name is not None and not isinstance(event_name, str):
            logging.warning(f"Ignoring S3 event with invalid event name {event_name!r}")
            yield None
            continue
        if event_name and not event_name.startswith("ObjectCreated"):
            logging.debug(f"Ignoring S3 event {event_name}")
            yield None
            continue
        bucket, obj = s3.get("bucket") or {}, s3.get("object") or {}
        if not (isinstance(bucket, dict) and isinstance(obj, dict)):
            logging.warning(f"Ignoring S3 event with invalid bucket or object: {s3}")
            yield None
            continue
        name, key = bucket.get("name"), obj.get("key")
        if not name or not isinstance(key, str):
            logging.warning(f"Ignoring S3 event without bucket name or object key: {s3}")
            yield None
            continue
        try:
            # Object keys in S3 event notifications are URL encoded, with spaces as '+'
            item = NotificationItem(bucket=name, key=unquote_plus(key))
        except ValidationError as e:
            logging.warning(f"Ignoring S3 event with invalid bucket name: {e}")
            item = None
        yield item


def _sns_message(record: dict) -> dict | None:
    sns = record.get("Sns")
    if not isinstance(sns, dict):
        return None
    try:
        message = json.loads(sns.get("Message") or "")
    except ValueError:
        logging.debug(f"Ignoring SNS message {sns.get('MessageId')} that is not JSON")
        return None
    return message if isinstance(message, dict) else None


def extract_items(event: dict[str, Any]) -> tuple[list[NotificationItem], int]:
    """
    Find the object-creation events in a notification batch.
    Returns the items and the number of records that were skipped.
    """
    items: list[NotificationItem] = []
    skipped = 0
    for record in event.get("Records") or []:
        if isinstance(record, dict) and (message := _sns_message(record)) is not None:
            if message.get("Event") == S3_TEST_EVENT:
                logging.info(f"Ignoring S3 test event for bucket {message.get('Bucket')}")
                skipped += 1
                continue
            records = message.get("Records") or [message]
        else:
            records = [record]
        for item in _s3_items(records):
            if item is None:
                skipped += 1
            else:
                items.append(item)
    return items, skipped


class IngestLoop:
    """Reconcile every object-creation event in a batch, one after the other"""

    def __init__(self, reconciler: Reconciler):
        self.reconciler = reconciler

    async def process(self, event: dict[str, Any]) -> BatchResult:
        items, skipped = extract_items(event)
        return await self.process_items(items, skipped=skipped)

    async def process_items(self, items: Iterable[NotificationItem], skipped: int = 0) -> BatchResult:
        result = BatchResult(skipped=skipped)
        for item in items:
            result.add(await self.reconciler.reconcile(item))
        await self.reconciler.tracer.flush()
        if result.failed:
            logging.warning(
                f"Processed batch with failures: {result.succeeded} succeeded, {result.failed} failed, {result.skipped} skipped"
            )
        else:
            logging.info(f"Processed batch: {result.succeeded} succeeded, {result.skipped} skipped")
        return result
