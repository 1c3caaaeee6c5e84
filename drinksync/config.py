"""
Drinksync Configuration

We read configuration from 2 sources, in order of precedence (higher is more priority)
- Environment variables
- A .env file, either in the current working directory or in a location specified
  by the DRINKSYNC_ENV_FILE environment variable
"""

import functools
from pathlib import Path
from typing import Annotated, Any

from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PREFIX = "drinksync_"

DEFAULT_OBJECT_URL_TEMPLATE = "https://{bucket}.s3.amazonaws.com/{key}"


class Settings(BaseSettings):
    env_file: Annotated[
        Path,
        Field(
            description="Location of a .env file (if used) relative to working directory",
        ),
    ] = Path(".env")

    aws_region: Annotated[
        str,
        Field(description="AWS region of the DynamoDB table and X-Ray endpoint"),
    ] = "us-east-1"

    dynamodb_endpoint: Annotated[
        str | None,
        Field(
            description="DynamoDB endpoint URL. Leave empty for AWS, set to e.g. http://localhost:8000 for DynamoDB Local"
        ),
    ] = None

    table_name: Annotated[
        str,
        Field(description="DynamoDB table holding the drink image records"),
    ] = "drink_images"

    object_url_template: Annotated[
        str,
        Field(
            description=(
                "Template for the stored file locator written to each record. "
                "May use {bucket} and {key} placeholders."
            )
        ),
    ] = DEFAULT_OBJECT_URL_TEMPLATE

    xray_enabled: Annotated[
        bool,
        Field(description="Submit a trace segment to AWS X-Ray before each DynamoDB interaction"),
    ] = False

    xray_endpoint: Annotated[
        str | None,
        Field(description="X-Ray endpoint URL. Leave empty for the regional AWS endpoint"),
    ] = None

    aws_max_attempts: Annotated[
        int,
        Field(description="Maximum number of attempts (including retries) for a single AWS call", ge=1),
    ] = 3

    aws_connect_timeout: Annotated[float, Field(description="AWS connect timeout in seconds", gt=0)] = 5.0
    aws_read_timeout: Annotated[float, Field(description="AWS read timeout in seconds", gt=0)] = 10.0

    log_level: Annotated[
        str,
        Field(description="Log level for the drinksync loggers (DEBUG, INFO, WARNING, ERROR)"),
    ] = "INFO"

    sns_topic_arn: Annotated[
        str | None,
        Field(
            description=(
                "If set, the HTTP notification endpoint only accepts messages published on this SNS topic"
            )
        ),
    ] = None

    @model_validator(mode="after")
    def check_template(self: Any) -> "Settings":
        if "{key}" not in self.object_url_template:
            raise ValueError(f"object_url_template must contain a {{key}} placeholder, got {self.object_url_template!r}")
        try:
            self.object_url_template.format(bucket="bucket", key="key")
        except (AttributeError, KeyError, IndexError, ValueError) as e:
            raise ValueError(
                f"object_url_template can only use {{bucket}} and {{key}} placeholders, got {self.object_url_template!r}: {e!r}"
            )
        self.log_level = self.log_level.upper()
        return self

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX)


@functools.lru_cache()
def get_settings() -> Settings:
    # The env_file location can itself come from the environment, so read the settings twice
    temp = Settings()
    load_dotenv(temp.env_file, override=False)
    return Settings()


def validate_settings():
    settings = get_settings()
    if settings.dynamodb_endpoint and settings.dynamodb_endpoint.startswith("http://"):
        if "localhost" not in settings.dynamodb_endpoint and "127.0.0.1" not in settings.dynamodb_endpoint:
            return (
                f"DynamoDB endpoint {settings.dynamodb_endpoint} is not local but does not use https. "
                "Credentials and records will be sent unencrypted."
            )
    if settings.object_url_template != DEFAULT_OBJECT_URL_TEMPLATE and "{bucket}" not in settings.object_url_template:
        return "object_url_template has no {bucket} placeholder, records from different buckets will look alike"


if __name__ == "__main__":
    # Echo the settings
    for k, v in get_settings().model_dump().items():
        print(f"{ENV_PREFIX.upper()}{k.upper()}={v}")
