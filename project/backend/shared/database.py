"""
Database client.

Supabase PostgreSQL client used by the Supabase persistence sink.
"""

import asyncio
from typing import Optional, Any, Callable
from supabase import create_client, Client
from shared.config import settings
from shared.errors import RetryableError, ConfigError


class DatabaseClient:
    """Supabase database client wrapper with retry logic."""

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        """
        Initialize database client.

        Args:
            url: Supabase project URL (defaults to settings)
            key: Service key (defaults to settings)
        """
        url = url or settings.supabase_url
        key = key or settings.supabase_service_key
        if not url or not key:
            raise ConfigError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required for the database client")
        try:
            self.client: Client = create_client(url, key)
        except Exception as e:
            raise ConfigError(f"Failed to initialize database client: {str(e)}") from e

    async def _execute_sync(self, func: Callable[[], Any], max_attempts: int = 3) -> Any:
        """
        Execute a synchronous Supabase operation in an async context.

        Args:
            func: Synchronous function to execute
            max_attempts: Maximum number of attempts

        Returns:
            Function result

        Raises:
            RetryableError: If operation fails after all retries
        """
        loop = asyncio.get_running_loop()
        for attempt in range(max_attempts):
            try:
                return await loop.run_in_executor(None, func)
            except Exception as e:
                if attempt == max_attempts - 1:
                    raise RetryableError(
                        f"Database operation failed after {max_attempts} attempts: {str(e)}"
                    ) from e
                # Exponential backoff: 2s, 4s, 8s
                await asyncio.sleep(2 ** (attempt + 1))

    def table(self, table_name: str) -> "AsyncTableQueryBuilder":
        """
        Get a table query builder with async execution support.

        Args:
            table_name: Name of the table

        Returns:
            AsyncTableQueryBuilder wrapper
        """
        return AsyncTableQueryBuilder(self, table_name)


class AsyncTableQueryBuilder:
    """Async wrapper for Supabase table query builder."""

    def __init__(self, db_client: DatabaseClient, table_name: str):
        self.db_client = db_client
        self.table_name = table_name
        self._query_builder = db_client.client.table(table_name)

    def select(self, *args, **kwargs):
        """Chain select operation."""
        self._query_builder = self._query_builder.select(*args, **kwargs)
        return self

    def upsert(self, *args, **kwargs):
        """Chain upsert operation."""
        self._query_builder = self._query_builder.upsert(*args, **kwargs)
        return self

    def eq(self, *args, **kwargs):
        """Chain eq filter."""
        self._query_builder = self._query_builder.eq(*args, **kwargs)
        return self

    def order(self, *args, **kwargs):
        """Chain order operation."""
        self._query_builder = self._query_builder.order(*args, **kwargs)
        return self

    async def execute(self, max_attempts: int = 3) -> Any:
        """
        Execute the query asynchronously.

        Args:
            max_attempts: Maximum number of retry attempts

        Returns:
            Query result
        """
        query_builder = self._query_builder
        return await self.db_client._execute_sync(
            lambda: query_builder.execute(),
            max_attempts
        )
