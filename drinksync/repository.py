"""
Storage of drink image records.

Records are keyed by (bar name, drink name). In DynamoDB the table has `barName` as partition key
and `drinkName` as sort key, and the image locator in the `s3ObjectKey` attribute.
"""

import logging
from typing import Any, Protocol

from botocore.exceptions import BotoCoreError, ClientError

from drinksync.errors import StoreUnavailableError, StoreWriteError
from drinksync.models import DrinkImage

BAR_NAME_ATTRIBUTE = "barName"
DRINK_NAME_ATTRIBUTE = "drinkName"
OBJECT_URL_ATTRIBUTE = "s3ObjectKey"


class DrinkImageRepository(Protocol):
    async def find(self, bar_name: str, drink_name: str) -> DrinkImage | None: ...

    async def insert(self, bar_name: str, drink_name: str, s3_object_url: str) -> None: ...

    async def update(self, bar_name: str, drink_name: str, s3_object_url: str) -> None: ...


def _key(bar_name: str, drink_name: str) -> dict[str, dict[str, str]]:
    return {
        BAR_NAME_ATTRIBUTE: {"S": bar_name},
        DRINK_NAME_ATTRIBUTE: {"S": drink_name},
    }


def _from_item(item: dict[str, dict[str, str]]) -> DrinkImage:
    return DrinkImage(
        bar_name=item[BAR_NAME_ATTRIBUTE]["S"],
        drink_name=item[DRINK_NAME_ATTRIBUTE]["S"],
        s3_object_url=item.get(OBJECT_URL_ATTRIBUTE, {}).get("S", ""),
    )


def _describe(e: Exception) -> str:
    if isinstance(e, ClientError):
        error = e.response.get("Error", {})
        return f"{error.get('Code', 'Unknown')}: {error.get('Message', str(e))}"
    return str(e)


class DynamoDBDrinkImageRepository:
    """Drink image records in a DynamoDB table, using a (aiobotocore) low-level client"""

    def __init__(self, client: Any, table_name: str):
        self.client = client
        self.table_name = table_name

    async def find(self, bar_name: str, drink_name: str) -> DrinkImage | None:
        try:
            res = await self.client.get_item(
                TableName=self.table_name,
                Key=_key(bar_name, drink_name),
                ConsistentRead=True,
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreUnavailableError(
                f"Cannot get {bar_name}/{drink_name} from {self.table_name}: {_describe(e)}"
            ) from e
        item = res.get("Item")
        if not item:
            return None
        return _from_item(item)

    async def insert(self, bar_name: str, drink_name: str, s3_object_url: str) -> None:
        # An unconditional put: a record that was created concurrently is simply overwritten
        item = _key(bar_name, drink_name)
        item[OBJECT_URL_ATTRIBUTE] = {"S": s3_object_url}
        try:
            await self.client.put_item(TableName=self.table_name, Item=item)
        except (ClientError, BotoCoreError) as e:
            raise StoreWriteError(f"Cannot put {bar_name}/{drink_name} in {self.table_name}: {_describe(e)}") from e

    async def update(self, bar_name: str, drink_name: str, s3_object_url: str) -> None:
        try:
            await self.client.update_item(
                TableName=self.table_name,
                Key=_key(bar_name, drink_name),
                UpdateExpression=f"SET {OBJECT_URL_ATTRIBUTE} = :val1",
                ExpressionAttributeValues={":val1": {"S": s3_object_url}},
            )
        except (ClientError, BotoCoreError) as e:
            raise StoreWriteError(f"Cannot update {bar_name}/{drink_name} in {self.table_name}: {_describe(e)}") from e


class MemoryDrinkImageRepository:
    """
    Keeps records in a dict. Used for dry runs and in the tests.
    Like DynamoDB, update on a missing key creates nothing.
    """

    def __init__(self, records: list[DrinkImage] | None = None):
        self.records: dict[tuple[str, str], DrinkImage] = {}
        for record in records or []:
            self.records[record.bar_name, record.drink_name] = record

    async def find(self, bar_name: str, drink_name: str) -> DrinkImage | None:
        record = self.records.get((bar_name, drink_name))
        return record.model_copy() if record else None

    async def insert(self, bar_name: str, drink_name: str, s3_object_url: str) -> None:
        self.records[bar_name, drink_name] = DrinkImage(bar_name=bar_name, drink_name=drink_name, s3_object_url=s3_object_url)

    async def update(self, bar_name: str, drink_name: str, s3_object_url: str) -> None:
        record = self.records.get((bar_name, drink_name))
        if record is None:
            logging.debug(f"Ignoring update of missing record {bar_name}/{drink_name}")
            return
        self.records[bar_name, drink_name] = record.model_copy(update={"s3_object_url": s3_object_url})
