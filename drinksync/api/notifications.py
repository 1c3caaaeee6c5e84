"""API endpoint for SNS HTTP(S) subscriptions."""

import json
import logging
from typing import Annotated, Literal
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from drinksync.config import get_settings
from drinksync.ingest import IngestLoop
from drinksync.models import BatchResult
from drinksync.service import create_ingest_loop

app_notifications = APIRouter(tags=["notifications"])

SnsMessageType = Literal["SubscriptionConfirmation", "UnsubscribeConfirmation", "Notification"]


class SnsHttpMessage(BaseModel):
    """The JSON body SNS posts to HTTP(S) subscribers"""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    type: SnsMessageType = Field(alias="Type")
    message_id: str = Field(alias="MessageId")
    topic_arn: str = Field(alias="TopicArn")
    message: str = Field("", alias="Message")
    subscribe_url: str | None = Field(None, alias="SubscribeURL")
    token: str | None = Field(None, alias="Token")


class ConfirmationResponse(BaseModel):
    status: Literal["confirmed", "ignored"]
    topic_arn: str


def get_ingest_loop() -> IngestLoop:
    return create_ingest_loop()


def check_subscribe_url(url: str | None) -> str:
    """Only follow confirmation links that point at the SNS service itself"""
    if not url:
        raise ValueError("Subscription confirmation without SubscribeURL")
    parsed = urlparse(url)
    host = parsed.hostname or ""
    if parsed.scheme != "https" or not (host.startswith("sns.") and host.endswith(".amazonaws.com")):
        raise ValueError(f"Refusing to confirm subscription at {url}: not an SNS endpoint")
    return url


async def confirm_subscription(url: str) -> None:
    async with httpx.AsyncClient() as client:
        res = await client.get(url)
    if res.is_error:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"SNS refused the subscription confirmation: {res.status_code}",
        )


# No response model: BatchResult has only defaults and would also validate a ConfirmationResponse
@app_notifications.post("/notifications", response_model=None)
async def receive_notification(
    request: Request,
    loop: IngestLoop = Depends(get_ingest_loop),
    message_type: Annotated[str | None, Header(alias="x-amz-sns-message-type")] = None,
) -> BatchResult | ConfirmationResponse:
    """
    Receive a message from an SNS HTTP(S) subscription.

    - Subscription confirmations are confirmed by visiting the SubscribeURL.
    - Notifications are expected to carry an S3 event notification; every object-created event in it
      is reconciled, and the summary of the batch is returned.

    SNS posts with content type text/plain, so the body is parsed here rather than by FastAPI.

    Message signatures (Signature, SigningCertURL) are not verified, and the TopicArn check only
    filters honest senders: anyone who can reach this endpoint can post a notification. Only expose
    it on a trusted network, e.g. behind a gateway that restricts callers to SNS.
    """
    body = await request.body()
    try:
        sns = SnsHttpMessage.model_validate(json.loads(body))
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Not an SNS message: {e}")

    if message_type and message_type != sns.type:
        raise ValueError(f"Message type header {message_type} does not match message type {sns.type}")
    topic = get_settings().sns_topic_arn
    if topic and sns.topic_arn != topic:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Topic {sns.topic_arn} is not accepted")

    if sns.type == "SubscriptionConfirmation":
        logging.info(f"Confirming subscription to {sns.topic_arn}")
        await confirm_subscription(check_subscribe_url(sns.subscribe_url))
        return ConfirmationResponse(status="confirmed", topic_arn=sns.topic_arn)
    if sns.type == "UnsubscribeConfirmation":
        logging.warning(f"Unsubscribed from {sns.topic_arn}")
        return ConfirmationResponse(status="ignored", topic_arn=sns.topic_arn)

    # Same shape as the record of an SNS event in lambda
    event = {"Records": [{"EventSource": "aws:sns", "Sns": sns.model_dump(by_alias=True)}]}
    return await loop.process(event)
