from enum import Enum
from typing import Annotated

from pydantic import BaseModel, Field

BarName = Annotated[str, Field(min_length=1, title="Bar name", description="Folder the drink image was stored in")]
DrinkName = Annotated[str, Field(min_length=1, title="Drink name", description="File name without extension")]


class DrinkImage(BaseModel):
    """A record in the drink images table, identified by (bar_name, drink_name)."""

    bar_name: BarName
    drink_name: DrinkName
    s3_object_url: str = Field(description="Fully qualified locator of the most recently stored image")


class NotificationItem(BaseModel):
    """One object-creation event: the bucket and (decoded) key of the new object."""

    bucket: str = Field(min_length=1)
    key: str


######################## RECONCILIATION RESULTS #########################


class ItemOutcome(str, Enum):
    INSERTED = "inserted"
    UPDATED = "updated"
    MALFORMED_PATH = "malformed_path"
    LOOKUP_FAILED = "lookup_failed"
    WRITE_FAILED = "write_failed"

    @property
    def ok(self) -> bool:
        return self in (ItemOutcome.INSERTED, ItemOutcome.UPDATED)


class ItemResult(BaseModel):
    item: NotificationItem
    outcome: ItemOutcome
    bar_name: str | None = None
    drink_name: str | None = None
    s3_object_url: str | None = None
    error: str | None = Field(None, description="Why this item could not be reconciled")


class BatchResult(BaseModel):
    """
    What happened to a batch of notifications. The batch as a whole counts as handled
    once every item was attempted, so callers need to look at `failed` to detect partial failure.
    """

    succeeded: int = 0
    failed: int = 0
    skipped: int = Field(0, description="Records that did not carry an object-creation event")
    items: list[ItemResult] = Field(default_factory=list)

    def add(self, result: ItemResult):
        self.items.append(result)
        if result.outcome.ok:
            self.succeeded += 1
        else:
            self.failed += 1

    @property
    def failures(self) -> list[ItemResult]:
        return [r for r in self.items if not r.outcome.ok]
