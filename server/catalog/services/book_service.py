"""书籍：列表、详情、新建/编辑表单流程、带依赖保护的删除"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from catalog.models.author import Author
from catalog.models.book import Book, BookGenre, book_url
from catalog.models.bookinstance import BookInstance, bookinstance_url
from catalog.models.genre import Genre
from catalog.schemas.book import (
    AuthorOption,
    BookListItem,
    BookResponse,
    BookInstanceSummary,
    BookDetailResponse,
    BookDraft,
    BookFormView,
    BookDeleteView,
)
from catalog.schemas.common import FieldError
from catalog.schemas.genre import GenreOption
from catalog.services import repository
from catalog.services.aggregate_service import aggregate
from catalog.services.author_service import to_author_summary
from catalog.services.genre_service import to_genre_response
from catalog.services.integrity_service import DeletionDecision, check_dependents
from catalog.services.outcome import FlowOutcome
from catalog.utils.dates import format_medium_date
from catalog.utils.errors import NotFoundError
from catalog.utils.selection import build_selection
from catalog.utils.validators import FieldRule, IdList, validate_fields

logger = logging.getLogger(__name__)

BOOK_RULES: tuple[FieldRule, ...] = (
    FieldRule("title", "书名不能为空"),
    FieldRule("author", "作者不能为空"),
    FieldRule("summary", "摘要不能为空"),
    FieldRule("isbn", "ISBN 不能为空"),
    FieldRule("genre", annotation=IdList, repeatable=True),
)

BOOK_LIST_URL = "/catalog/books"

BOOK_POPULATE = (
    selectinload(Book.author),
    selectinload(Book.genre_links).selectinload(BookGenre.genre),
)


# ─────────────────── 视图转换 ───────────────────


def to_book_response(book: Book) -> BookResponse:
    return BookResponse(
        id=book.id,
        title=book.title,
        url=book_url(book.id),
        author_id=book.author_id,
        author=to_author_summary(book.author) if book.author else None,
        summary=book.summary,
        isbn=book.isbn,
        genre=[to_genre_response(g) for g in book.genres],
        genre_ids=book.genre_ids,
    )


def to_instance_summary(instance: BookInstance) -> BookInstanceSummary:
    return BookInstanceSummary(
        id=instance.id,
        imprint=instance.imprint,
        status=instance.status,
        due_back=instance.due_back,
        due_back_formatted=format_medium_date(instance.due_back),
        url=bookinstance_url(instance.id),
    )


def _build_form_view(
    title: str,
    authors: Sequence[Author],
    genres: Sequence[Genre],
    draft: BookDraft | None,
    errors: list[FieldError] | None = None,
) -> BookFormView:
    selected_author = [draft.author] if draft else []
    selected_genres = draft.genre if draft else []
    return BookFormView(
        title=title,
        authors=[
            AuthorOption(**to_author_summary(opt.item).model_dump(), checked=opt.checked)
            for opt in build_selection(authors, selected_author)
        ],
        genres=[
            GenreOption(**to_genre_response(opt.item).model_dump(), checked=opt.checked)
            for opt in build_selection(genres, selected_genres)
        ],
        book=draft,
        errors=errors or [],
    )


# ─────────────────── 查询 ───────────────────


def _fetch_book(book_id: str, populate: Sequence[Any] = BOOK_POPULATE):
    return lambda db: repository.find_by_id(db, Book, book_id, populate)


def _fetch_book_instances(book_id: str):
    return lambda db: repository.find_all(
        db, BookInstance, where=(BookInstance.book_id == book_id,)
    )


def _reference_fetches() -> dict:
    return {
        "authors": lambda db: repository.find_all(
            db, Author, order_by=(Author.family_name, Author.first_name)
        ),
        "genres": lambda db: repository.find_all(db, Genre, order_by=(Genre.name,)),
    }


async def list_books(db: AsyncSession) -> list[BookListItem]:
    books = await repository.find_all(
        db, Book,
        fields=(Book.title, Book.author_id),
        order_by=(Book.title,),
        populate=(selectinload(Book.author),),
    )
    return [
        BookListItem(
            id=b.id,
            title=b.title,
            url=book_url(b.id),
            author=to_author_summary(b.author) if b.author else None,
        )
        for b in books
    ]


async def get_book_detail(
    session_factory: async_sessionmaker[AsyncSession], book_id: str
) -> BookDetailResponse:
    results = await aggregate(session_factory, {
        "book": _fetch_book(book_id),
        "book_instances": _fetch_book_instances(book_id),
    })
    book = results["book"]
    if book is None:
        raise NotFoundError("书籍不存在")
    return BookDetailResponse(
        title=book.title,
        book=to_book_response(book),
        book_instances=[to_instance_summary(i) for i in results["book_instances"]],
    )


# ─────────────────── 新建 / 编辑 ───────────────────


async def get_book_form(
    session_factory: async_sessionmaker[AsyncSession], book_id: str | None = None
) -> BookFormView:
    """表单展示：并发加载作者、类型列表；编辑时同时加载书籍并按其现有类型勾选"""
    fetches = _reference_fetches()
    if book_id is not None:
        fetches["book"] = _fetch_book(book_id, (selectinload(Book.genre_links),))
    results = await aggregate(session_factory, fetches)

    if book_id is None:
        return _build_form_view("Create Book", results["authors"], results["genres"], None)

    book = results["book"]
    if book is None:
        raise NotFoundError("书籍不存在")
    draft = BookDraft(
        id=book.id,
        title=book.title,
        author=book.author_id,
        summary=book.summary,
        isbn=book.isbn,
        genre=book.genre_ids,
    )
    return _build_form_view("Update Book", results["authors"], results["genres"], draft)


async def _check_references(db: AsyncSession, draft: dict) -> list[FieldError]:
    """校验草稿引用的作者与类型确实存在"""
    errors: list[FieldError] = []
    if await repository.count(db, Author, Author.id == draft["author"]) == 0:
        errors.append(FieldError(field="author", message="所选作者不存在"))
    genre_ids = set(draft["genre"])
    if genre_ids and await repository.count(db, Genre, Genre.id.in_(genre_ids)) != len(genre_ids):
        errors.append(FieldError(field="genre", message="所选类型不存在"))
    return errors


def _replace_genre_links(book: Book, genre_ids: Sequence[str]) -> None:
    """按提交顺序整体替换类型关联，重复 ID 只保留第一次出现"""
    existing = {link.genre_id: link for link in book.genre_links}
    links = []
    for position, genre_id in enumerate(dict.fromkeys(genre_ids)):
        link = existing.get(genre_id) or BookGenre(genre_id=genre_id)
        link.position = position
        links.append(link)
    book.genre_links = links


async def submit_book(
    db: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    raw: Mapping[str, Any],
    book_id: str | None = None,
) -> FlowOutcome:
    """校验 → 失败则重新加载参考列表并回显；成功则写库并重定向到详情页

    编辑时不预先检查书籍是否存在，写入时不存在按存储层失败处理。
    """
    result = validate_fields(raw, BOOK_RULES)
    errors = list(result.errors)
    if not errors:
        errors = await _check_references(db, result.draft)

    draft = BookDraft(id=book_id, **result.draft)

    if errors:
        logger.info(f"[书籍] 表单校验失败: {[e.field for e in errors]}")
        refs = await aggregate(session_factory, _reference_fetches())
        return FlowOutcome.render(_build_form_view(
            "Create Book" if book_id is None else "Update Book",
            refs["authors"],
            refs["genres"],
            draft,
            errors,
        ))

    values = {
        "title": draft.title,
        "author_id": draft.author,
        "summary": draft.summary,
        "isbn": draft.isbn,
    }
    if book_id is None:
        book = Book(**values)
        _replace_genre_links(book, draft.genre)
        book = await repository.insert(db, book)
        logger.info(f"[书籍] 新建 {book.id}")
    else:
        book = await repository.update_by_id(
            db, Book, book_id, values, populate=(selectinload(Book.genre_links),)
        )
        _replace_genre_links(book, draft.genre)
        await db.flush()
        logger.info(f"[书籍] 更新 {book.id}")
    return FlowOutcome.redirect(book_url(book.id))


# ─────────────────── 删除 ───────────────────


async def _check_book_deletable(
    session_factory: async_sessionmaker[AsyncSession], book_id: str
) -> DeletionDecision:
    return await check_dependents(
        session_factory, _fetch_book(book_id), _fetch_book_instances(book_id)
    )


def _delete_view(decision: DeletionDecision) -> BookDeleteView:
    return BookDeleteView(
        title="Delete Book",
        book=to_book_response(decision.parent),
        book_instances=[to_instance_summary(i) for i in decision.blockers],
    )


async def get_book_delete(
    session_factory: async_sessionmaker[AsyncSession], book_id: str
) -> BookDeleteView:
    decision = await _check_book_deletable(session_factory, book_id)
    if decision.parent is None:
        raise NotFoundError("书籍不存在")
    return _delete_view(decision)


async def delete_book(
    db: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    book_id: str,
) -> FlowOutcome:
    """仍有副本时回显确认页及全部副本，不做删除"""
    decision = await _check_book_deletable(session_factory, book_id)
    if decision.parent is None:
        logger.warning(f"[书籍] 删除时记录已不存在: {book_id}")
        return FlowOutcome.redirect(BOOK_LIST_URL)
    if decision.blocked:
        logger.info(f"[书籍] 删除被阻止 {book_id}: 仍有 {len(decision.blockers)} 个副本")
        return FlowOutcome.render(_delete_view(decision))

    # 先删关联行再删书籍，两条语句带同一个无副本条件，在同一事务内执行
    await repository.delete_where(
        db, BookGenre,
        BookGenre.book_id == book_id,
        repository.without_dependents(BookInstance.book_id, book_id),
    )
    deleted = await repository.delete_if_no_dependents(
        db, Book, book_id, BookInstance.book_id
    )
    if not deleted:
        # 检查之后有新的副本写入，或记录已被并发删除
        decision = await _check_book_deletable(session_factory, book_id)
        if decision.parent is not None and decision.blocked:
            logger.info(f"[书籍] 删除被阻止 {book_id}: 检查后新增副本")
            return FlowOutcome.render(_delete_view(decision))
        return FlowOutcome.redirect(BOOK_LIST_URL)

    logger.info(f"[书籍] 删除 {book_id}")
    return FlowOutcome.redirect(BOOK_LIST_URL)
