import logging
import os
from typing import Optional

import dotenv
from pydantic import BaseModel, Field, field_validator  # type: ignore

from pipefy_helper.config.constants.pipefy import (
    DEFAULT_TIMEOUT,
    PIPEFY_GRAPHQL_ENDPOINT,
    EnvVars,
)
from pipefy_helper.sources.client.graphql.client import GraphQLClient
from pipefy_helper.sources.client.iclient import IClient
from pipefy_helper.utils.logger import create_logger, set_log_level


class PipefyGraphQLClientViaToken(GraphQLClient):
    """Pipefy GraphQL client via personal access token."""

    def __init__(
        self,
        token: str,
        timeout: int = DEFAULT_TIMEOUT,
        endpoint: str = PIPEFY_GRAPHQL_ENDPOINT,
    ) -> None:
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        super().__init__(
            endpoint=endpoint,
            headers=headers,
            timeout=timeout
        )
        self.token = token

    def get_endpoint(self) -> str:
        """Get the GraphQL endpoint."""
        return self.endpoint


class PipefyTokenConfig(BaseModel):
    """Configuration for Pipefy GraphQL client via personal access token.
    Args:
        token: Pipefy personal access token
        timeout: Request timeout in seconds
        endpoint: GraphQL endpoint (defaults to Pipefy's public endpoint)
        log_level: Level applied to the pipefy_helper loggers (unchanged when unset)
    """
    token: str = Field(..., description="Pipefy personal access token")
    timeout: int = Field(default=DEFAULT_TIMEOUT, description="Request timeout in seconds", gt=0)
    endpoint: str = Field(default=PIPEFY_GRAPHQL_ENDPOINT, description="GraphQL endpoint URL")
    log_level: Optional[str] = Field(default=None, description="Log level, e.g. INFO or DEBUG")

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("No 'token' specified for Pipefy client")
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        if not isinstance(logging.getLevelName(v.upper()), int):
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()

    def create_client(self) -> PipefyGraphQLClientViaToken:
        """Create a Pipefy GraphQL client."""
        set_log_level(self.log_level)
        return PipefyGraphQLClientViaToken(self.token, self.timeout, self.endpoint)


class PipefyClient(IClient):
    """Builder class for Pipefy GraphQL clients."""

    def __init__(self, client: PipefyGraphQLClientViaToken) -> None:
        """Initialize with a Pipefy GraphQL client object."""
        self.client = client

    def get_client(self) -> PipefyGraphQLClientViaToken:
        """Return the Pipefy GraphQL client object."""
        return self.client

    @classmethod
    def build_with_config(cls, config: PipefyTokenConfig) -> "PipefyClient":
        """Build PipefyClient with configuration.

        Args:
            config: Pipefy configuration instance
        Returns:
            PipefyClient instance
        """
        return cls(config.create_client())

    @classmethod
    def build_from_env(
        cls,
        logger: Optional[logging.Logger] = None,
        dotenv_path: Optional[str] = None,
    ) -> "PipefyClient":
        """Build PipefyClient from PIPEFY_* environment variables (a .env file is loaded first).

        Raises:
            ValueError: when PIPEFY_API_TOKEN is not set or a value is invalid
        """
        logger = logger or create_logger("pipefy_client")
        dotenv.load_dotenv(dotenv_path)

        token = os.getenv(EnvVars.API_TOKEN.value)
        if not token:
            logger.error("%s is not set", EnvVars.API_TOKEN.value)
            raise ValueError(f"{EnvVars.API_TOKEN.value} environment variable is required")

        values = {"token": token}
        timeout = os.getenv(EnvVars.TIMEOUT.value)
        if timeout:
            values["timeout"] = int(timeout)
        endpoint = os.getenv(EnvVars.ENDPOINT.value)
        if endpoint:
            values["endpoint"] = endpoint
        log_level = os.getenv(EnvVars.LOG_LEVEL.value)
        if log_level:
            values["log_level"] = log_level

        config = PipefyTokenConfig(**values)
        logger.debug("Building Pipefy client for %s", config.endpoint)
        return cls.build_with_config(config)
