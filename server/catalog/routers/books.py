from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.database import get_db, get_session_factory
from catalog.schemas.book import BookListItem, BookDetailResponse, BookFormView, BookDeleteView
from catalog.services.book_service import (
    list_books,
    get_book_detail,
    get_book_form,
    submit_book,
    get_book_delete,
    delete_book,
)
from catalog.utils.deps import get_raw_fields, respond

router = APIRouter(prefix="/catalog", tags=["书籍"])


@router.get("/books", response_model=list[BookListItem], summary="书籍列表")
async def book_list(db: AsyncSession = Depends(get_db)):
    """按书名排序，只投影书名与作者"""
    return await list_books(db)


@router.get("/book/create", response_model=BookFormView, summary="新建书籍表单")
async def book_create_get(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    return await get_book_form(session_factory)


@router.post("/book/create", summary="提交新建书籍")
async def book_create_post(
    raw: dict[str, Any] = Depends(get_raw_fields),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """校验失败回显表单（200），成功则 303 重定向到详情页"""
    outcome = await submit_book(db, session_factory, raw)
    await db.commit()
    return respond(outcome)


@router.get("/book/{book_id}", response_model=BookDetailResponse, summary="书籍详情")
async def book_detail(
    book_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """书籍（含作者、类型）与其全部副本"""
    return await get_book_detail(session_factory, book_id)


@router.get("/book/{book_id}/delete", response_model=BookDeleteView, summary="删除书籍确认")
async def book_delete_get(
    book_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    return await get_book_delete(session_factory, book_id)


@router.post("/book/{book_id}/delete", summary="删除书籍")
async def book_delete_post(
    book_id: str,
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """仍有副本时回显确认页及副本列表，不删除"""
    outcome = await delete_book(db, session_factory, book_id)
    await db.commit()
    return respond(outcome)


@router.get("/book/{book_id}/update", response_model=BookFormView, summary="编辑书籍表单")
async def book_update_get(
    book_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    return await get_book_form(session_factory, book_id)


@router.post("/book/{book_id}/update", summary="提交编辑书籍")
async def book_update_post(
    book_id: str,
    raw: dict[str, Any] = Depends(get_raw_fields),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    outcome = await submit_book(db, session_factory, raw, book_id)
    await db.commit()
    return respond(outcome)
