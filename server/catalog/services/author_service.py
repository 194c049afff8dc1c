import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.models.author import Author, author_name, author_lifespan, author_url
from catalog.models.book import Book, book_url
from catalog.schemas.author import (
    AuthorSummary,
    AuthorResponse,
    AuthorBook,
    AuthorDetailResponse,
    AuthorDraft,
    AuthorFormView,
    AuthorDeleteView,
)
from catalog.services import repository
from catalog.services.aggregate_service import aggregate
from catalog.services.outcome import FlowOutcome
from catalog.utils.dates import to_iso
from catalog.utils.errors import NotFoundError
from catalog.utils.validators import FieldRule, OptionalDate, bounded_text, validate_fields

logger = logging.getLogger(__name__)

AUTHOR_RULES: tuple[FieldRule, ...] = (
    FieldRule("first_name", "名字不能为空", bounded_text(100)),
    FieldRule("family_name", "姓氏不能为空", bounded_text(100)),
    FieldRule("date_of_birth", "出生日期无效", OptionalDate),
    FieldRule("date_of_death", "去世日期无效", OptionalDate),
)

AUTHOR_LIST_URL = "/catalog/authors"


def to_author_summary(author: Author) -> AuthorSummary:
    return AuthorSummary(
        id=author.id,
        first_name=author.first_name,
        family_name=author.family_name,
        name=author_name(author.first_name, author.family_name),
        url=author_url(author.id),
    )


def to_author_response(author: Author) -> AuthorResponse:
    return AuthorResponse(
        **to_author_summary(author).model_dump(),
        date_of_birth=author.date_of_birth,
        date_of_death=author.date_of_death,
        date_of_birth_iso=to_iso(author.date_of_birth),
        date_of_death_iso=to_iso(author.date_of_death),
        lifespan=author_lifespan(author.date_of_birth, author.date_of_death),
    )


def _to_author_book(book: Book) -> AuthorBook:
    return AuthorBook(id=book.id, title=book.title, summary=book.summary, url=book_url(book.id))


def _fetch_author(author_id: str):
    return lambda db: repository.find_by_id(db, Author, author_id)


def _fetch_author_books(author_id: str):
    return lambda db: repository.find_all(
        db, Book,
        where=(Book.author_id == author_id,),
        fields=(Book.title, Book.summary),
        order_by=(Book.title,),
    )


async def list_authors(db: AsyncSession) -> list[AuthorResponse]:
    authors = await repository.find_all(
        db, Author, order_by=(Author.family_name, Author.first_name)
    )
    return [to_author_response(a) for a in authors]


async def get_author_detail(
    session_factory: async_sessionmaker[AsyncSession], author_id: str
) -> AuthorDetailResponse:
    results = await aggregate(session_factory, {
        "author": _fetch_author(author_id),
        "author_books": _fetch_author_books(author_id),
    })
    author = results["author"]
    if author is None:
        raise NotFoundError("作者不存在")
    return AuthorDetailResponse(
        title="Author Detail",
        author=to_author_response(author),
        author_books=[_to_author_book(b) for b in results["author_books"]],
    )


async def get_author_form(db: AsyncSession, author_id: str | None = None) -> AuthorFormView:
    """作者表单没有参考列表，编辑时只需加载目标记录"""
    if author_id is None:
        return AuthorFormView(title="Create Author")
    author = await repository.find_by_id(db, Author, author_id)
    if author is None:
        raise NotFoundError("作者不存在")
    return AuthorFormView(
        title="Update Author",
        author=AuthorDraft(
            id=author.id,
            first_name=author.first_name,
            family_name=author.family_name,
            date_of_birth=author.date_of_birth,
            date_of_death=author.date_of_death,
        ),
    )


async def submit_author(
    db: AsyncSession, raw: Mapping[str, Any], author_id: str | None = None
) -> FlowOutcome:
    result = validate_fields(raw, AUTHOR_RULES)
    draft = result.draft

    if not result.is_valid:
        logger.info(f"[作者] 表单校验失败: {[e.field for e in result.errors]}")
        return FlowOutcome.render(AuthorFormView(
            title="Create Author" if author_id is None else "Update Author",
            author=AuthorDraft(id=author_id, **draft),
            errors=result.errors,
        ))

    if author_id is None:
        author = await repository.insert(db, Author(**draft))
        logger.info(f"[作者] 新建 {author.id}")
    else:
        author = await repository.update_by_id(db, Author, author_id, draft)
        logger.info(f"[作者] 更新 {author.id}")
    return FlowOutcome.redirect(author_url(author.id))


async def get_author_delete(
    session_factory: async_sessionmaker[AsyncSession], author_id: str
) -> AuthorDeleteView:
    results = await aggregate(session_factory, {
        "author": _fetch_author(author_id),
        "author_books": _fetch_author_books(author_id),
    })
    if results["author"] is None:
        raise NotFoundError("作者不存在")
    return AuthorDeleteView(
        title="Delete Author",
        author=to_author_response(results["author"]),
        author_books=[_to_author_book(b) for b in results["author_books"]],
    )


async def delete_author(db: AsyncSession, author_id: str) -> FlowOutcome:
    """无条件删除；引用该作者的书籍保留原 author_id"""
    deleted = await repository.delete_by_id(db, Author, author_id)
    if deleted:
        logger.info(f"[作者] 删除 {author_id}")
    else:
        logger.warning(f"[作者] 删除时记录已不存在: {author_id}")
    return FlowOutcome.redirect(AUTHOR_LIST_URL)
