"""目录首页统计与健康检查"""

import pytest
from httpx import AsyncClient

from catalog.models.bookinstance import BookInstance


@pytest.mark.asyncio
async def test_index_counts(client: AsyncClient, book_instance: BookInstance):
    resp = await client.get("/catalog/")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data == {
        "book_count": 1,
        "book_instance_count": 1,
        "book_instance_available_count": 1,
        "author_count": 1,
        "genre_count": 3,
    }


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"
