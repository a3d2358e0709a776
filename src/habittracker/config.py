"""
Runtime configuration for the habit tracker.

Configuration is read from environment variables, as set by the SAM template
for the Lambda functions or by the shell for local runs.

Classes:
    TrackerConfig: Validated configuration values and derived identifiers
"""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_APP_ID = "default-progress-tracker"
TRACKER_ID_PREFIX = "tana-financial-tracker"


class TrackerConfig(BaseModel):
    """
    Configuration for a tracker deployment.

    Attributes:
        table_name: DynamoDB table holding tracker documents
        identity_pool_id: Cognito identity pool used for anonymous identities
        app_id: Application id; part of the tracker id
        region: AWS region for boto3 clients
        log_level: Root logging level
        environment: Deployment environment name (dev, staging, prod)
        cors_origin: Allowed origin for API responses

    Example:
        >>> config = TrackerConfig(app_id="demo")
        >>> config.tracker_id
        'tana-financial-tracker-demo'
        >>> config.collection_path
        'trackers/tana-financial-tracker-demo/users'
    """

    table_name: Optional[str] = Field(None, description="DynamoDB table name")
    identity_pool_id: Optional[str] = Field(
        None, description="Cognito identity pool id"
    )
    app_id: str = Field(DEFAULT_APP_ID, min_length=1, description="Application id")
    region: str = Field("us-east-1", description="AWS region")
    log_level: str = Field("INFO", description="Logging level")
    environment: str = Field("dev", description="Deployment environment")
    cors_origin: str = Field("*", description="Allowed CORS origin")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize the level name and reject unknown levels."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def tracker_id(self) -> str:
        """Identifier of this tracker instance."""
        return f"{TRACKER_ID_PREFIX}-{self.app_id}"

    @property
    def collection_path(self) -> str:
        """Collection holding one document per user for this tracker."""
        return f"trackers/{self.tracker_id}/users"

    @classmethod
    def from_env(cls) -> "TrackerConfig":
        """
        Build the configuration from environment variables.

        Unset variables fall back to the field defaults.

        Returns:
            TrackerConfig instance
        """
        env = {
            "table_name": os.getenv("TRACKER_TABLE"),
            "identity_pool_id": os.getenv("TRACKER_IDENTITY_POOL_ID"),
            "app_id": os.getenv("TRACKER_APP_ID"),
            "region": os.getenv("AWS_REGION"),
            "log_level": os.getenv("LOG_LEVEL"),
            "environment": os.getenv("ENVIRONMENT"),
            "cors_origin": os.getenv("CORS_ORIGIN"),
        }
        return cls(**{k: v for k, v in env.items() if v})
