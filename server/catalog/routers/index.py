from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.database import get_session_factory
from catalog.schemas.common import CatalogIndexResponse
from catalog.services.catalog_service import get_catalog_index

router = APIRouter(prefix="/catalog", tags=["目录"])


@router.get("/", response_model=CatalogIndexResponse, summary="目录首页统计")
async def index(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """书籍、副本、可借副本、作者、类型数量"""
    return await get_catalog_index(session_factory)
