from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.database import get_db, get_session_factory
from catalog.schemas.author import (
    AuthorResponse,
    AuthorDetailResponse,
    AuthorFormView,
    AuthorDeleteView,
)
from catalog.services.author_service import (
    list_authors,
    get_author_detail,
    get_author_form,
    submit_author,
    get_author_delete,
    delete_author,
)
from catalog.utils.deps import get_raw_fields, respond

router = APIRouter(prefix="/catalog", tags=["作者"])


@router.get("/authors", response_model=list[AuthorResponse], summary="作者列表")
async def author_list(db: AsyncSession = Depends(get_db)):
    """按姓氏排序"""
    return await list_authors(db)


@router.get("/author/create", response_model=AuthorFormView, summary="新建作者表单")
async def author_create_get(db: AsyncSession = Depends(get_db)):
    return await get_author_form(db)


@router.post("/author/create", summary="提交新建作者")
async def author_create_post(
    raw: dict[str, Any] = Depends(get_raw_fields),
    db: AsyncSession = Depends(get_db),
):
    outcome = await submit_author(db, raw)
    await db.commit()
    return respond(outcome)


@router.get("/author/{author_id}", response_model=AuthorDetailResponse, summary="作者详情")
async def author_detail(
    author_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """作者信息及其全部著作"""
    return await get_author_detail(session_factory, author_id)


@router.get("/author/{author_id}/delete", response_model=AuthorDeleteView, summary="删除作者确认")
async def author_delete_get(
    author_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    return await get_author_delete(session_factory, author_id)


@router.post("/author/{author_id}/delete", summary="删除作者")
async def author_delete_post(author_id: str, db: AsyncSession = Depends(get_db)):
    outcome = await delete_author(db, author_id)
    await db.commit()
    return respond(outcome)


@router.get("/author/{author_id}/update", response_model=AuthorFormView, summary="编辑作者表单")
async def author_update_get(author_id: str, db: AsyncSession = Depends(get_db)):
    return await get_author_form(db, author_id)


@router.post("/author/{author_id}/update", summary="提交编辑作者")
async def author_update_post(
    author_id: str,
    raw: dict[str, Any] = Depends(get_raw_fields),
    db: AsyncSession = Depends(get_db),
):
    outcome = await submit_author(db, raw, author_id)
    await db.commit()
    return respond(outcome)
