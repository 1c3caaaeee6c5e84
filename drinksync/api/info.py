"""API Endpoints for server information and configuration."""

from importlib.metadata import PackageNotFoundError, version

from fastapi import APIRouter
from pydantic import BaseModel, Field

from drinksync.config import get_settings, validate_settings

app_info = APIRouter(tags=["informational"])


class ConfigResponse(BaseModel):
    """Non-secret configuration of this instance."""

    table_name: str = Field(..., description="The DynamoDB table records are written to.")
    aws_region: str = Field(..., description="The AWS region of the table.")
    object_url_template: str = Field(..., description="Template of the locator written to each record.")
    xray_enabled: bool = Field(..., description="Whether trace segments are submitted to X-Ray.")
    sns_topic_arn: str | None = Field(None, description="The only SNS topic accepted, if restricted.")
    warnings: list[str] = Field(..., description="A list of configuration warnings.")
    api_version: str = Field(..., description="The version of drinksync.")


def _version() -> str:
    try:
        return version("drinksync")
    except PackageNotFoundError:
        return "unknown"


@app_info.get("/config")
def get_config() -> ConfigResponse:
    """Get the configuration of this drinksync instance."""
    settings = get_settings()
    return ConfigResponse(
        table_name=settings.table_name,
        aws_region=settings.aws_region,
        object_url_template=settings.object_url_template,
        xray_enabled=settings.xray_enabled,
        sns_topic_arn=settings.sns_topic_arn,
        warnings=[w for w in [validate_settings()] if w],
        api_version=_version(),
    )
