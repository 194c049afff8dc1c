import logging
from collections.abc import Mapping, Sequence
from typing import Any, Literal

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from catalog.models.book import Book, book_url
from catalog.models.bookinstance import (
    BookInstance,
    BOOK_INSTANCE_STATUSES,
    DEFAULT_BOOK_INSTANCE_STATUS,
    bookinstance_status_choices,
    bookinstance_url,
)
from catalog.schemas.book import BookBrief
from catalog.schemas.bookinstance import (
    BookInstanceResponse,
    BookInstanceDetailResponse,
    BookOption,
    StatusOption,
    BookInstanceDraft,
    BookInstanceFormView,
    BookInstanceDeleteView,
)
from catalog.schemas.common import FieldError
from catalog.services import repository
from catalog.services.aggregate_service import aggregate
from catalog.services.outcome import FlowOutcome
from catalog.utils.dates import format_medium_date
from catalog.utils.errors import NotFoundError
from catalog.utils.selection import build_selection
from catalog.utils.validators import FieldRule, OptionalDate, validate_fields

logger = logging.getLogger(__name__)

BOOK_INSTANCE_RULES: tuple[FieldRule, ...] = (
    FieldRule("book", "必须指定书籍"),
    FieldRule("imprint", "版本信息不能为空"),
    FieldRule(
        "status",
        annotation=Literal[BOOK_INSTANCE_STATUSES],
        default=DEFAULT_BOOK_INSTANCE_STATUS,
    ),
    FieldRule("due_back", "归还日期无效", OptionalDate),
)

BOOK_INSTANCE_LIST_URL = "/catalog/bookinstances"


def to_instance_response(instance: BookInstance) -> BookInstanceResponse:
    book = instance.book
    return BookInstanceResponse(
        id=instance.id,
        book_id=instance.book_id,
        book=BookBrief(id=book.id, title=book.title, url=book_url(book.id)) if book else None,
        imprint=instance.imprint,
        status=instance.status,
        due_back=instance.due_back,
        due_back_formatted=format_medium_date(instance.due_back),
        url=bookinstance_url(instance.id),
    )


def _build_form_view(
    title: str,
    books: Sequence[Book],
    draft: BookInstanceDraft | None,
    errors: list[FieldError] | None = None,
) -> BookInstanceFormView:
    selected_book = draft.book if draft and draft.book else None
    selected_status = [draft.status] if draft else []
    return BookInstanceFormView(
        title=title,
        book_list=[
            BookOption(id=opt.item.id, title=opt.item.title, url=book_url(opt.item.id), checked=opt.checked)
            for opt in build_selection(books, [selected_book])
        ],
        bookinstance_status=bookinstance_status_choices(),
        status_options=[
            StatusOption(value=opt.item, checked=opt.checked)
            for opt in build_selection(bookinstance_status_choices(), selected_status, key=str)
        ],
        selected_book=selected_book,
        bookinstance=draft,
        errors=errors or [],
    )


def _fetch_book_list():
    return lambda db: repository.find_all(
        db, Book, fields=(Book.title,), order_by=(Book.title,)
    )


def _fetch_instance(instance_id: str, populate: Sequence[Any] = ()):
    return lambda db: repository.find_by_id(db, BookInstance, instance_id, populate)


async def list_bookinstances(db: AsyncSession) -> list[BookInstanceResponse]:
    instances = await repository.find_all(
        db, BookInstance,
        join=(BookInstance.book,),
        order_by=(Book.title, BookInstance.imprint),
        populate=(selectinload(BookInstance.book),),
    )
    return [to_instance_response(i) for i in instances]


async def get_bookinstance_detail(db: AsyncSession, instance_id: str) -> BookInstanceDetailResponse:
    instance = await repository.find_by_id(
        db, BookInstance, instance_id, (selectinload(BookInstance.book),)
    )
    if instance is None:
        raise NotFoundError("书籍副本不存在")
    book_title = instance.book.title if instance.book else ""
    return BookInstanceDetailResponse(
        title=f"Copy: {book_title}",
        bookinstance=to_instance_response(instance),
    )


async def get_bookinstance_form(
    session_factory: async_sessionmaker[AsyncSession], instance_id: str | None = None
) -> BookInstanceFormView:
    fetches = {"book_list": _fetch_book_list()}
    if instance_id is not None:
        fetches["bookinstance"] = _fetch_instance(instance_id)
    results = await aggregate(session_factory, fetches)

    if instance_id is None:
        return _build_form_view("Create BookInstance", results["book_list"], None)

    instance = results["bookinstance"]
    if instance is None:
        raise NotFoundError("书籍副本不存在")
    draft = BookInstanceDraft(
        id=instance.id,
        book=instance.book_id,
        imprint=instance.imprint,
        status=instance.status,
        due_back=instance.due_back,
    )
    return _build_form_view("Update BookInstance", results["book_list"], draft)


async def submit_bookinstance(
    db: AsyncSession,
    session_factory: async_sessionmaker[AsyncSession],
    raw: Mapping[str, Any],
    instance_id: str | None = None,
) -> FlowOutcome:
    result = validate_fields(raw, BOOK_INSTANCE_RULES)
    errors = list(result.errors)
    if not errors and await repository.count(db, Book, Book.id == result.draft["book"]) == 0:
        errors.append(FieldError(field="book", message="所选书籍不存在"))

    draft = BookInstanceDraft(id=instance_id, **result.draft)

    if errors:
        logger.info(f"[副本] 表单校验失败: {[e.field for e in errors]}")
        refs = await aggregate(session_factory, {"book_list": _fetch_book_list()})
        return FlowOutcome.render(_build_form_view(
            "Create BookInstance" if instance_id is None else "Update BookInstance",
            refs["book_list"],
            draft,
            errors,
        ))

    values = {
        "book_id": draft.book,
        "imprint": draft.imprint,
        "status": draft.status,
        "due_back": draft.due_back,
    }
    if instance_id is None:
        instance = await repository.insert(db, BookInstance(**values))
        logger.info(f"[副本] 新建 {instance.id}")
    else:
        instance = await repository.update_by_id(db, BookInstance, instance_id, values)
        logger.info(f"[副本] 更新 {instance.id}")
    return FlowOutcome.redirect(bookinstance_url(instance.id))


async def get_bookinstance_delete(db: AsyncSession, instance_id: str) -> BookInstanceDeleteView:
    instance = await repository.find_by_id(
        db, BookInstance, instance_id, (selectinload(BookInstance.book),)
    )
    if instance is None:
        raise NotFoundError("书籍副本不存在")
    return BookInstanceDeleteView(
        title="Delete BookInstance",
        bookinstance=to_instance_response(instance),
    )


async def delete_bookinstance(db: AsyncSession, instance_id: str) -> FlowOutcome:
    deleted = await repository.delete_by_id(db, BookInstance, instance_id)
    if deleted:
        logger.info(f"[副本] 删除 {instance_id}")
    else:
        logger.warning(f"[副本] 删除时记录已不存在: {instance_id}")
    return FlowOutcome.redirect(BOOK_INSTANCE_LIST_URL)
