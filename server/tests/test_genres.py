"""类型模块功能测试"""

import pytest
from httpx import AsyncClient

from catalog.models.book import Book
from catalog.models.genre import Genre


class TestGenreCrud:

    @pytest.mark.asyncio
    async def test_create(self, client: AsyncClient):
        resp = await client.post("/catalog/genre/create", data={"name": "  Horror & Gothic "})
        assert resp.status_code == 303
        detail = (await client.get(resp.headers["location"])).json()
        assert detail["genre"]["name"] == "Horror &amp; Gothic"

    @pytest.mark.asyncio
    async def test_create_rejected(self, client: AsyncClient):
        resp = await client.post("/catalog/genre/create", data={"name": " "})
        assert resp.status_code == 200
        assert [e["field"] for e in resp.json()["errors"]] == ["name"]

    @pytest.mark.asyncio
    async def test_list_sorted(self, client: AsyncClient, genres: list[Genre]):
        data = (await client.get("/catalog/genres")).json()
        assert [g["name"] for g in data] == ["Fantasy", "Poetry", "Science Fiction"]

    @pytest.mark.asyncio
    async def test_detail_lists_books(self, client: AsyncClient, book: Book, genres: list[Genre]):
        detail = (await client.get(f"/catalog/genre/{genres[1].id}")).json()
        assert [b["title"] for b in detail["genre_books"]] == ["Foundation"]

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, genres: list[Genre]):
        form = (await client.get(f"/catalog/genre/{genres[0].id}/update")).json()
        assert form["genre"]["name"] == "Fantasy"

        resp = await client.post(f"/catalog/genre/{genres[0].id}/update", data={"name": "High Fantasy"})
        assert resp.status_code == 303
        detail = (await client.get(f"/catalog/genre/{genres[0].id}")).json()
        assert detail["genre"]["name"] == "High Fantasy"

    @pytest.mark.asyncio
    async def test_not_found(self, client: AsyncClient):
        assert (await client.get("/catalog/genre/missing")).status_code == 404
        assert (await client.get("/catalog/genre/missing/delete")).status_code == 404


class TestDeleteGenre:

    @pytest.mark.asyncio
    async def test_delete_removes_book_association(
        self, client: AsyncClient, book: Book, genres: list[Genre]
    ):
        resp = await client.post(f"/catalog/genre/{genres[1].id}/delete")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/catalog/genres"

        detail = (await client.get(f"/catalog/book/{book.id}")).json()
        assert detail["book"]["genre_ids"] == []
