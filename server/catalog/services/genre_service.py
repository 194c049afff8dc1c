import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.models.book import Book, BookGenre, book_url
from catalog.models.genre import Genre, genre_url
from catalog.schemas.genre import (
    GenreResponse,
    GenreBook,
    GenreDetailResponse,
    GenreDraft,
    GenreFormView,
    GenreDeleteView,
)
from catalog.services import repository
from catalog.services.aggregate_service import aggregate
from catalog.services.outcome import FlowOutcome
from catalog.utils.errors import NotFoundError
from catalog.utils.validators import FieldRule, bounded_text, validate_fields

logger = logging.getLogger(__name__)

GENRE_RULES: tuple[FieldRule, ...] = (
    FieldRule("name", "类型名称不能为空", bounded_text(100)),
)

GENRE_LIST_URL = "/catalog/genres"


def to_genre_response(genre: Genre) -> GenreResponse:
    return GenreResponse(id=genre.id, name=genre.name, url=genre_url(genre.id))


def _fetch_genre(genre_id: str):
    return lambda db: repository.find_by_id(db, Genre, genre_id)


def _fetch_genre_books(genre_id: str):
    return lambda db: repository.find_all(
        db, Book,
        where=(Book.genre_links.any(BookGenre.genre_id == genre_id),),
        fields=(Book.title, Book.summary),
        order_by=(Book.title,),
    )


def _to_genre_book(book: Book) -> GenreBook:
    return GenreBook(id=book.id, title=book.title, summary=book.summary, url=book_url(book.id))


async def list_genres(db: AsyncSession) -> list[GenreResponse]:
    genres = await repository.find_all(db, Genre, order_by=(Genre.name,))
    return [to_genre_response(g) for g in genres]


async def _load_genre_with_books(
    session_factory: async_sessionmaker[AsyncSession], genre_id: str
) -> tuple[Genre, list[Book]]:
    results = await aggregate(session_factory, {
        "genre": _fetch_genre(genre_id),
        "genre_books": _fetch_genre_books(genre_id),
    })
    if results["genre"] is None:
        raise NotFoundError("类型不存在")
    return results["genre"], results["genre_books"]


async def get_genre_detail(
    session_factory: async_sessionmaker[AsyncSession], genre_id: str
) -> GenreDetailResponse:
    genre, books = await _load_genre_with_books(session_factory, genre_id)
    return GenreDetailResponse(
        title="Genre Detail",
        genre=to_genre_response(genre),
        genre_books=[_to_genre_book(b) for b in books],
    )


async def get_genre_form(db: AsyncSession, genre_id: str | None = None) -> GenreFormView:
    if genre_id is None:
        return GenreFormView(title="Create Genre")
    genre = await repository.find_by_id(db, Genre, genre_id)
    if genre is None:
        raise NotFoundError("类型不存在")
    return GenreFormView(title="Update Genre", genre=GenreDraft(id=genre.id, name=genre.name))


async def submit_genre(
    db: AsyncSession, raw: Mapping[str, Any], genre_id: str | None = None
) -> FlowOutcome:
    result = validate_fields(raw, GENRE_RULES)

    if not result.is_valid:
        logger.info(f"[类型] 表单校验失败: {[e.field for e in result.errors]}")
        return FlowOutcome.render(GenreFormView(
            title="Create Genre" if genre_id is None else "Update Genre",
            genre=GenreDraft(id=genre_id, **result.draft),
            errors=result.errors,
        ))

    if genre_id is None:
        genre = await repository.insert(db, Genre(**result.draft))
        logger.info(f"[类型] 新建 {genre.id}")
    else:
        genre = await repository.update_by_id(db, Genre, genre_id, result.draft)
        logger.info(f"[类型] 更新 {genre.id}")
    return FlowOutcome.redirect(genre_url(genre.id))


async def get_genre_delete(
    session_factory: async_sessionmaker[AsyncSession], genre_id: str
) -> GenreDeleteView:
    genre, books = await _load_genre_with_books(session_factory, genre_id)
    return GenreDeleteView(
        title="Delete Genre",
        genre=to_genre_response(genre),
        genre_books=[_to_genre_book(b) for b in books],
    )


async def delete_genre(db: AsyncSession, genre_id: str) -> FlowOutcome:
    """无条件删除；书籍与该类型的关联行随之删除"""
    deleted = await repository.delete_by_id(db, Genre, genre_id)
    if deleted:
        logger.info(f"[类型] 删除 {genre_id}")
    else:
        logger.warning(f"[类型] 删除时记录已不存在: {genre_id}")
    return FlowOutcome.redirect(GENRE_LIST_URL)
