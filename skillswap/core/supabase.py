import logging
from typing import Optional, Dict, Any, List
from supabase import create_client, Client
import httpx
from fastapi.concurrency import run_in_threadpool

from .config import Settings
from .exceptions import StoreError

logger = logging.getLogger(__name__)

def get_supabase_client(settings: Settings) -> Client:
    """Get Supabase client instance."""
    if not settings.supabase_url or not settings.supabase_key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_KEY must be set in environment variables"
        )

    logger.info(f"Supabase URL: {settings.supabase_url}")
    return create_client(settings.supabase_url, settings.supabase_key)

async def check_rest_endpoint(settings: Settings, timeout: float = 5.0) -> bool:
    """
    Check that the Supabase REST endpoint answers.

    Args:
        settings: Application settings with the Supabase URL and key
        timeout: Request timeout in seconds

    Returns:
        True if the endpoint responded without a server error
    """
    url = f"{settings.supabase_url}/rest/v1/"
    headers = {
        "apikey": settings.supabase_key,
        "Authorization": f"Bearer {settings.supabase_key}",
    }
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(url, headers=headers)
        return response.status_code < 500
    except httpx.HTTPError as e:
        logger.warning(f"Supabase REST check failed: {e}")
        return False

# Helper function for database operations
async def execute_query(
    client: Client,
    table: str,
    query_type: str,
    data: Optional[Dict[str, Any]] = None,
    filters: Optional[Dict[str, Any]] = None,
    or_filter: Optional[str] = None,
    select: str = "*",
    limit: Optional[int] = None,
    order_by: Optional[Dict[str, str]] = None
) -> List[Dict[str, Any]]:
    """
    Execute a query on the Supabase database.

    Args:
        client: The Supabase client
        table: The table to query
        query_type: The type of query (select, insert, upsert, update, delete)
        data: The data to insert or update
        filters: Equality filters, column -> value
        or_filter: A PostgREST ``or`` expression, e.g. ``a.eq.1,b.eq.1``
        select: The columns to select
        limit: The maximum number of rows to return
        order_by: The columns to order by, column -> "asc" | "desc"

    Returns:
        The rows returned by the query

    Raises:
        StoreError: If the query fails; the original error is chained
    """
    logger.debug(f"Executing {query_type} on table {table} filters={filters} or={or_filter}")

    if query_type in ("insert", "upsert", "update") and not data:
        raise ValueError(f"Data is required for {query_type} operations")
    if query_type in ("update", "delete") and not filters:
        raise ValueError(f"Filters are required for {query_type} operations")

    try:
        query = client.table(table)

        if query_type == "select":
            query = query.select(select)
        elif query_type == "insert":
            query = query.insert(data)
        elif query_type == "upsert":
            query = query.upsert(data)
        elif query_type == "update":
            query = query.update(data)
        elif query_type == "delete":
            query = query.delete()
        else:
            raise ValueError(f"Invalid query type: {query_type}")

        for key, value in (filters or {}).items():
            query = query.eq(key, value)

        if or_filter:
            query = query.or_(or_filter)

        if query_type == "select":
            for key, direction in (order_by or {}).items():
                query = query.order(key, desc=direction.lower() == "desc")
            if limit:
                query = query.limit(limit)

        # supabase-py executes synchronously
        result = await run_in_threadpool(query.execute)
        return result.data or []

    except ValueError:
        raise
    except Exception as e:
        logger.error(f"Error executing {query_type} on {table}: {e!r}")
        raise StoreError(f"Database {query_type} on {table} failed") from e
