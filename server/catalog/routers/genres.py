from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.database import get_db, get_session_factory
from catalog.schemas.genre import (
    GenreResponse,
    GenreDetailResponse,
    GenreFormView,
    GenreDeleteView,
)
from catalog.services.genre_service import (
    list_genres,
    get_genre_detail,
    get_genre_form,
    submit_genre,
    get_genre_delete,
    delete_genre,
)
from catalog.utils.deps import get_raw_fields, respond

router = APIRouter(prefix="/catalog", tags=["类型"])


@router.get("/genres", response_model=list[GenreResponse], summary="类型列表")
async def genre_list(db: AsyncSession = Depends(get_db)):
    """按名称排序"""
    return await list_genres(db)


@router.get("/genre/create", response_model=GenreFormView, summary="新建类型表单")
async def genre_create_get(db: AsyncSession = Depends(get_db)):
    return await get_genre_form(db)


@router.post("/genre/create", summary="提交新建类型")
async def genre_create_post(
    raw: dict[str, Any] = Depends(get_raw_fields),
    db: AsyncSession = Depends(get_db),
):
    outcome = await submit_genre(db, raw)
    await db.commit()
    return respond(outcome)


@router.get("/genre/{genre_id}", response_model=GenreDetailResponse, summary="类型详情")
async def genre_detail(
    genre_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """类型及属于该类型的全部书籍"""
    return await get_genre_detail(session_factory, genre_id)


@router.get("/genre/{genre_id}/delete", response_model=GenreDeleteView, summary="删除类型确认")
async def genre_delete_get(
    genre_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    return await get_genre_delete(session_factory, genre_id)


@router.post("/genre/{genre_id}/delete", summary="删除类型")
async def genre_delete_post(genre_id: str, db: AsyncSession = Depends(get_db)):
    outcome = await delete_genre(db, genre_id)
    await db.commit()
    return respond(outcome)


@router.get("/genre/{genre_id}/update", response_model=GenreFormView, summary="编辑类型表单")
async def genre_update_get(genre_id: str, db: AsyncSession = Depends(get_db)):
    return await get_genre_form(db, genre_id)


@router.post("/genre/{genre_id}/update", summary="提交编辑类型")
async def genre_update_post(
    genre_id: str,
    raw: dict[str, Any] = Depends(get_raw_fields),
    db: AsyncSession = Depends(get_db),
):
    outcome = await submit_genre(db, raw, genre_id)
    await db.commit()
    return respond(outcome)
