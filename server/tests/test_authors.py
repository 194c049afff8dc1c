"""作者模块功能测试"""

import pytest
from httpx import AsyncClient

from catalog.models.author import Author
from catalog.models.book import Book


class TestAuthorCrud:

    @pytest.mark.asyncio
    async def test_create_and_detail(self, client: AsyncClient):
        resp = await client.post("/catalog/author/create", data={
            "first_name": " Ursula ",
            "family_name": "Le Guin",
            "date_of_birth": "1929-10-21",
        })
        assert resp.status_code == 303
        detail = (await client.get(resp.headers["location"])).json()
        author = detail["author"]
        assert author["name"] == "Le Guin, Ursula"
        assert author["lifespan"] == "Oct 21, 1929 - Present"
        assert author["date_of_birth_iso"] == "1929-10-21"
        assert author["date_of_death_iso"] is None
        assert detail["author_books"] == []

    @pytest.mark.asyncio
    async def test_create_rejected(self, client: AsyncClient):
        resp = await client.post("/catalog/author/create", data={
            "first_name": "",
            "family_name": "Le Guin",
            "date_of_death": "2018-13-01",
        })
        assert resp.status_code == 200
        data = resp.json()
        assert [e["field"] for e in data["errors"]] == ["first_name", "date_of_death"]
        assert data["author"]["family_name"] == "Le Guin"
        assert (await client.get("/catalog/authors")).json() == []

    @pytest.mark.asyncio
    async def test_list_sorted_by_family_name(self, client: AsyncClient, author: Author):
        await client.post("/catalog/author/create", data={"first_name": "Jane", "family_name": "Austen"})
        data = (await client.get("/catalog/authors")).json()
        assert [a["family_name"] for a in data] == ["Asimov", "Austen"]
        assert data[0]["lifespan"] == "Jan 2, 1920 - Apr 6, 1992"

    @pytest.mark.asyncio
    async def test_update(self, client: AsyncClient, author: Author):
        form = await client.get(f"/catalog/author/{author.id}/update")
        assert form.json()["author"]["date_of_birth"] == "1920-01-02"

        resp = await client.post(f"/catalog/author/{author.id}/update", data={
            "first_name": "Isaac",
            "family_name": "Asimov",
        })
        assert resp.status_code == 303
        detail = (await client.get(f"/catalog/author/{author.id}")).json()
        assert detail["author"]["lifespan"] == "unknown"

    @pytest.mark.asyncio
    async def test_detail_not_found(self, client: AsyncClient):
        assert (await client.get("/catalog/author/missing")).status_code == 404
        assert (await client.get("/catalog/author/missing/update")).status_code == 404
        assert (await client.get("/catalog/author/missing/delete")).status_code == 404


class TestDeleteAuthor:

    @pytest.mark.asyncio
    async def test_delete_confirm_lists_books(self, client: AsyncClient, author: Author, book: Book):
        resp = await client.get(f"/catalog/author/{author.id}/delete")
        assert resp.status_code == 200
        assert [b["id"] for b in resp.json()["author_books"]] == [book.id]

    @pytest.mark.asyncio
    async def test_delete_is_unconditional(self, client: AsyncClient, author: Author, book: Book):
        """作者删除不做依赖检查，书籍保留原 author_id"""
        resp = await client.post(f"/catalog/author/{author.id}/delete")
        assert resp.status_code == 303
        assert resp.headers["location"] == "/catalog/authors"
        assert (await client.get(f"/catalog/author/{author.id}")).status_code == 404

        detail = (await client.get(f"/catalog/book/{book.id}")).json()
        assert detail["book"]["author_id"] == author.id
        assert detail["book"]["author"] is None
