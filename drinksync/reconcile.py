import logging

from drinksync.errors import MalformedPathError, StoreUnavailableError, StoreWriteError
from drinksync.models import ItemOutcome, ItemResult, NotificationItem
from drinksync.paths import object_url, parse_object_key
from drinksync.repository import DrinkImageRepository
from drinksync.tracing import NullTracer, Tracer

TRACE_LABEL = "DynamoDB Interaction"


class Reconciler:
    """
    Keep the drink image record of a newly stored object current.

    For every item the record for (bar, drink) is looked up: if it exists its locator is overwritten,
    otherwise it is created. Failures are reported in the returned ItemResult and never raised,
    so one bad item cannot stop the rest of a batch.
    """

    def __init__(self, repository: DrinkImageRepository, tracer: Tracer | None = None, url_template: str | None = None):
        self.repository = repository
        self.tracer = tracer or NullTracer()
        self.url_template = url_template

    async def reconcile(self, item: NotificationItem) -> ItemResult:
        try:
            bar_name, drink_name = parse_object_key(item.key)
        except MalformedPathError as e:
            logging.error(f"Skipping s3://{item.bucket}/{item.key}: {e}")
            return ItemResult(item=item, outcome=ItemOutcome.MALFORMED_PATH, error=str(e))

        url = object_url(item.bucket, item.key, self.url_template)
        result = ItemResult(
            item=item, outcome=ItemOutcome.LOOKUP_FAILED, bar_name=bar_name, drink_name=drink_name, s3_object_url=url
        )

        self.tracer.trace(TRACE_LABEL)
        try:
            existing = await self.repository.find(bar_name, drink_name)
        except StoreUnavailableError as e:
            logging.error(f"Error getting item {bar_name}/{drink_name}: {e}")
            result.error = str(e)
            return result

        self.tracer.trace(TRACE_LABEL)
        try:
            if existing is not None:
                await self.repository.update(bar_name, drink_name, url)
                result.outcome = ItemOutcome.UPDATED
            else:
                await self.repository.insert(bar_name, drink_name, url)
                result.outcome = ItemOutcome.INSERTED
        except StoreWriteError as e:
            action = "updating" if existing is not None else "putting"
            logging.error(f"Error {action} item {bar_name}/{drink_name}: {e}")
            result.outcome = ItemOutcome.WRITE_FAILED
            result.error = str(e)
            return result

        logging.info(f"{result.outcome.value.capitalize()} {bar_name}/{drink_name} -> {url}")
        return result
