from typing import Any

import aiohttp  # type: ignore

from pipefy_helper.sources.client.graphql.response import GraphQLResponse
from pipefy_helper.utils.logger import create_logger

logger = create_logger("graphql_client")


class GraphQLClient:
    """Generic GraphQL client for making GraphQL requests."""

    def __init__(
        self,
        endpoint: str,
        headers: dict[str, str] | None = None,
        timeout: int = 30,
    ) -> None:
        self.endpoint = endpoint
        self.headers = headers or {}
        self.timeout = timeout

    # A short-lived session per request keeps the session bound to the
    # event loop that awaits it.

    async def execute(
        self,
        query: str,
        variables: dict[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> GraphQLResponse:
        """Execute a GraphQL query."""
        payload: dict[str, Any] = {
            "query": query,
            "variables": variables or {},
        }
        if operation_name:
            payload["operationName"] = operation_name

        try:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.endpoint,
                    json=payload,
                    headers=self.headers,
                ) as response:
                    response_data = await response.json(content_type=None)
                    if not isinstance(response_data, dict):
                        return GraphQLResponse(
                            success=False,
                            message=f"Unexpected response (HTTP {response.status}) for {operation_name or 'query'}",
                        )
                    if response.status >= 400 and not response_data.get("errors"):
                        return GraphQLResponse(
                            success=False,
                            data=response_data.get("data"),
                            message=f"HTTP {response.status}: {response_data.get('error') or response.reason}",
                        )
                    return GraphQLResponse.from_response(response_data)
        except aiohttp.ClientError as e:
            logger.error("GraphQL request %s to %s failed: %s", operation_name, self.endpoint, e)
            return GraphQLResponse(
                success=False,
                message=f"Request failed: {e!s}",
            )
        except ValueError as e:
            # body was not JSON
            return GraphQLResponse(
                success=False,
                message=f"Invalid JSON response: {e!s}",
            )

    async def close(self) -> None:
        """No-op close: sessions are short-lived per request and auto-closed."""
        return

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None
