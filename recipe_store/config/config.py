"""
Connection and table settings for the recipe store.

Values come from keyword arguments first, then the process environment
(a ``.env`` file in the working directory is loaded on import).

Environment variables:
    AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, AWS_REGION
    DYNAMODB_ENDPOINT_URL      local or moto endpoint
    AWS_DYNAMODB_TABLE         base table name, ``recipes`` by default
    DYNAMODB_TABLE_PREFIX      optional application prefix
    DYNAMODB_CONSISTENT_READS  ``true`` for strongly consistent point reads
    DYNAMODB_MAX_RETRIES       botocore retry attempts
    DYNAMODB_TIMEOUT_SECONDS   connect/read timeout
    ENVIRONMENT                dev, staging, prod or test
    DYNAMODB_DEBUG_LOGGING     ``true`` to log every table operation
"""

import logging
import os
from typing import Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()

ENVIRONMENTS = ('dev', 'staging', 'prod', 'test')


def _env_flag(name: str) -> Callable[[], bool]:
    return lambda: os.getenv(name, "false").strip().lower() in ("1", "true", "yes")


def _env(name: str, default: Optional[str] = None) -> Callable[[], Optional[str]]:
    return lambda: os.getenv(name, default)


class RecipeStoreConfig(BaseModel):
    """Where the recipe table lives and how the gateway talks to it."""

    model_config = ConfigDict(validate_assignment=True)

    aws_access_key_id: Optional[str] = Field(default_factory=_env("AWS_ACCESS_KEY_ID"))
    aws_secret_access_key: Optional[str] = Field(default_factory=_env("AWS_SECRET_ACCESS_KEY"))
    region_name: str = Field(default_factory=_env("AWS_REGION", "us-east-1"))
    endpoint_url: Optional[str] = Field(
        default_factory=_env("DYNAMODB_ENDPOINT_URL"),
        description="Overrides the regional endpoint, e.g. DynamoDB Local"
    )

    table_name: str = Field(default_factory=_env("AWS_DYNAMODB_TABLE", "recipes"))
    table_prefix: str = Field(default_factory=_env("DYNAMODB_TABLE_PREFIX", ""))
    consistent_reads: bool = Field(
        default_factory=_env_flag("DYNAMODB_CONSISTENT_READS"),
        description="Strongly consistent GetItem on the base table; index queries are always eventual"
    )

    max_pool_connections: int = Field(default=50, ge=1)
    retries: int = Field(default_factory=lambda: int(os.getenv("DYNAMODB_MAX_RETRIES", "3")), ge=0)
    timeout_seconds: float = Field(default_factory=lambda: float(os.getenv("DYNAMODB_TIMEOUT_SECONDS", "30")), gt=0)

    environment: str = Field(default_factory=_env("ENVIRONMENT", "dev"))
    enable_debug_logging: bool = Field(default_factory=_env_flag("DYNAMODB_DEBUG_LOGGING"))

    @field_validator('region_name', 'table_name')
    @classmethod
    def validate_required(cls, v, info):
        if not v:
            label = "AWS region name" if info.field_name == 'region_name' else "Table name"
            raise ValueError(f"{label} is required")
        return v

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        if v not in ENVIRONMENTS:
            raise ValueError(f"Environment must be one of: {list(ENVIRONMENTS)}")
        return v

    def get_table_name(self, base_name: Optional[str] = None) -> str:
        """``[prefix_][environment_]name``; production tables carry no environment part."""
        parts = [self.table_prefix] if self.table_prefix else []
        if self.environment != "prod":
            parts.append(self.environment)
        parts.append(base_name or self.table_name)
        return "_".join(parts)

    def configure_logging(self) -> None:
        if self.enable_debug_logging:
            logging.getLogger("recipe_store").setLevel(logging.DEBUG)

    @classmethod
    def from_env(cls) -> 'RecipeStoreConfig':
        return cls()

    @classmethod
    def for_local_development(cls) -> 'RecipeStoreConfig':
        """Settings for DynamoDB Local on port 8000 with dummy credentials."""
        return cls(
            aws_access_key_id="local",
            aws_secret_access_key="local",
            region_name="us-east-1",
            endpoint_url="http://localhost:8000",
            environment="dev",
            enable_debug_logging=True
        )
