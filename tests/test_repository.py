import pytest
from botocore.exceptions import EndpointConnectionError

from drinksync.errors import StoreUnavailableError, StoreWriteError
from drinksync.models import DrinkImage
from drinksync.repository import DynamoDBDrinkImageRepository, MemoryDrinkImageRepository
from tests.tools import FakeDynamoDB, client_error

TABLE = "drink_images"
URL = "https://bar-bucket.s3.amazonaws.com/mojito-bar/margarita.png"


@pytest.mark.anyio
async def test_dynamodb_find_missing():
    client = FakeDynamoDB()
    repo = DynamoDBDrinkImageRepository(client, TABLE)
    assert await repo.find("mojito-bar", "margarita") is None
    operation, kwargs = client.calls[0]
    assert operation == "get_item"
    assert kwargs["TableName"] == TABLE
    assert kwargs["Key"] == {"barName": {"S": "mojito-bar"}, "drinkName": {"S": "margarita"}}
    assert kwargs["ConsistentRead"] is True


@pytest.mark.anyio
async def test_dynamodb_insert_and_find():
    client = FakeDynamoDB()
    repo = DynamoDBDrinkImageRepository(client, TABLE)
    await repo.insert("mojito-bar", "margarita", URL)
    assert client.tables[TABLE][("mojito-bar", "margarita")] == {
        "barName": {"S": "mojito-bar"},
        "drinkName": {"S": "margarita"},
        "s3ObjectKey": {"S": URL},
    }
    assert await repo.find("mojito-bar", "margarita") == DrinkImage(
        bar_name="mojito-bar", drink_name="margarita", s3_object_url=URL
    )


@pytest.mark.anyio
async def test_dynamodb_update():
    client = FakeDynamoDB()
    repo = DynamoDBDrinkImageRepository(client, TABLE)
    await repo.insert("mojito-bar", "margarita", URL)
    await repo.update("mojito-bar", "margarita", URL + "?v=2")
    operation, kwargs = client.calls[-1]
    assert operation == "update_item"
    assert kwargs["UpdateExpression"] == "SET s3ObjectKey = :val1"
    assert kwargs["ExpressionAttributeValues"] == {":val1": {"S": URL + "?v=2"}}
    record = await repo.find("mojito-bar", "margarita")
    assert record is not None and record.s3_object_url == URL + "?v=2"


@pytest.mark.anyio
async def test_dynamodb_lookup_errors():
    for error in [
        client_error("AccessDeniedException", "GetItem"),
        client_error("ResourceNotFoundException", "GetItem", "Requested resource not found"),
        EndpointConnectionError(endpoint_url="http://localhost:8000"),
    ]:
        repo = DynamoDBDrinkImageRepository(FakeDynamoDB(fail={"get_item": error}), TABLE)
        with pytest.raises(StoreUnavailableError) as e:
            await repo.find("mojito-bar", "margarita")
        assert "mojito-bar/margarita" in str(e.value)


@pytest.mark.anyio
async def test_dynamodb_write_errors():
    error = client_error("ProvisionedThroughputExceededException", "PutItem", "Slow down")
    repo = DynamoDBDrinkImageRepository(FakeDynamoDB(fail={"put_item": error, "update_item": error}), TABLE)
    with pytest.raises(StoreWriteError, match="ProvisionedThroughputExceededException: Slow down"):
        await repo.insert("mojito-bar", "margarita", URL)
    with pytest.raises(StoreWriteError):
        await repo.update("mojito-bar", "margarita", URL)


@pytest.mark.anyio
async def test_memory_repository():
    repo = MemoryDrinkImageRepository()
    assert await repo.find("tiki", "zombie") is None
    # update never creates records
    await repo.update("tiki", "zombie", URL)
    assert await repo.find("tiki", "zombie") is None
    await repo.insert("tiki", "zombie", URL)
    await repo.update("tiki", "zombie", "other")
    assert repo.records == {("tiki", "zombie"): DrinkImage(bar_name="tiki", drink_name="zombie", s3_object_url="other")}
    # insert overwrites
    await repo.insert("tiki", "zombie", URL)
    assert len(repo.records) == 1
    assert repo.records["tiki", "zombie"].s3_object_url == URL
