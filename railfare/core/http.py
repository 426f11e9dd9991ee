import httpx
from typing import AsyncIterator

from railfare.core.config import settings


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    """
    Dependency to get an outbound HTTP client.
    One client per incoming request, closed when the request is done.
    """
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        yield client
