from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.database import get_db, get_session_factory
from catalog.schemas.bookinstance import (
    BookInstanceResponse,
    BookInstanceDetailResponse,
    BookInstanceFormView,
    BookInstanceDeleteView,
)
from catalog.services.bookinstance_service import (
    list_bookinstances,
    get_bookinstance_detail,
    get_bookinstance_form,
    submit_bookinstance,
    get_bookinstance_delete,
    delete_bookinstance,
)
from catalog.utils.deps import get_raw_fields, respond

router = APIRouter(prefix="/catalog", tags=["书籍副本"])


@router.get("/bookinstances", response_model=list[BookInstanceResponse], summary="副本列表")
async def bookinstance_list(db: AsyncSession = Depends(get_db)):
    return await list_bookinstances(db)


@router.get("/bookinstance/create", response_model=BookInstanceFormView, summary="新建副本表单")
async def bookinstance_create_get(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """书籍下拉列表 + 状态可选值"""
    return await get_bookinstance_form(session_factory)


@router.post("/bookinstance/create", summary="提交新建副本")
async def bookinstance_create_post(
    raw: dict[str, Any] = Depends(get_raw_fields),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    outcome = await submit_bookinstance(db, session_factory, raw)
    await db.commit()
    return respond(outcome)


@router.get("/bookinstance/{instance_id}", response_model=BookInstanceDetailResponse, summary="副本详情")
async def bookinstance_detail(instance_id: str, db: AsyncSession = Depends(get_db)):
    return await get_bookinstance_detail(db, instance_id)


@router.get("/bookinstance/{instance_id}/delete", response_model=BookInstanceDeleteView, summary="删除副本确认")
async def bookinstance_delete_get(instance_id: str, db: AsyncSession = Depends(get_db)):
    return await get_bookinstance_delete(db, instance_id)


@router.post("/bookinstance/{instance_id}/delete", summary="删除副本")
async def bookinstance_delete_post(instance_id: str, db: AsyncSession = Depends(get_db)):
    outcome = await delete_bookinstance(db, instance_id)
    await db.commit()
    return respond(outcome)


@router.get("/bookinstance/{instance_id}/update", response_model=BookInstanceFormView, summary="编辑副本表单")
async def bookinstance_update_get(
    instance_id: str,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    return await get_bookinstance_form(session_factory, instance_id)


@router.post("/bookinstance/{instance_id}/update", summary="提交编辑副本")
async def bookinstance_update_post(
    instance_id: str,
    raw: dict[str, Any] = Depends(get_raw_fields),
    db: AsyncSession = Depends(get_db),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    outcome = await submit_bookinstance(db, session_factory, raw, instance_id)
    await db.commit()
    return respond(outcome)
