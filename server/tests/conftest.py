"""测试公共 Fixtures：每个测试独立的 SQLite 文件库 + AsyncClient

聚合查询会为每个子查询打开独立会话，内存库在多连接间不共享，
因此使用临时文件库 + NullPool。
"""

import uuid
from datetime import date

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import NullPool

from catalog.database import Base, get_db, get_session_factory
from catalog.models.author import Author
from catalog.models.genre import Genre
from catalog.models.book import Book, BookGenre
from catalog.models.bookinstance import BookInstance


# ──────────── 数据库引擎 ────────────

@pytest_asyncio.fixture
async def engine(tmp_path):
    test_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'catalog_test.db'}",
        echo=False,
        poolclass=NullPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


# ──────────── FastAPI TestClient ────────────

@pytest_asyncio.fixture
async def client(session_factory):
    from catalog.main import app

    async def _override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ──────────── 预置数据 ────────────

@pytest_asyncio.fixture
async def author(session_factory) -> Author:
    async with session_factory() as db:
        obj = Author(
            id=str(uuid.uuid4()),
            first_name="Isaac",
            family_name="Asimov",
            date_of_birth=date(1920, 1, 2),
            date_of_death=date(1992, 4, 6),
        )
        db.add(obj)
        await db.commit()
        return obj


@pytest_asyncio.fixture
async def genres(session_factory) -> list[Genre]:
    async with session_factory() as db:
        objs = [
            Genre(id=str(uuid.uuid4()), name="Fantasy"),
            Genre(id=str(uuid.uuid4()), name="Science Fiction"),
            Genre(id=str(uuid.uuid4()), name="Poetry"),
        ]
        db.add_all(objs)
        await db.commit()
        return objs


@pytest_asyncio.fixture
async def book(session_factory, author: Author, genres: list[Genre]) -> Book:
    """属于 Science Fiction 类型、没有副本的书籍"""
    async with session_factory() as db:
        obj = Book(
            id=str(uuid.uuid4()),
            title="Foundation",
            author_id=author.id,
            summary="The Galactic Empire is dying.",
            isbn="9780553293357",
        )
        obj.genre_links = [BookGenre(genre_id=genres[1].id, position=0)]
        db.add(obj)
        await db.commit()
        return obj


@pytest_asyncio.fixture
async def book_instance(session_factory, book: Book) -> BookInstance:
    async with session_factory() as db:
        obj = BookInstance(
            id=str(uuid.uuid4()),
            book_id=book.id,
            imprint="Gnome Press, 1951",
            status="Available",
        )
        db.add(obj)
        await db.commit()
        return obj
