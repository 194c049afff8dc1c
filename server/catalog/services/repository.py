"""通用实体存取：按 ID 查询、投影列表、排序、关联展开、增删改、计数

每个函数都是单条原子操作，跨操作的一致性由调用方负责。
populate 传入 SQLAlchemy loader option（如 selectinload(Book.author)），
用于在会话关闭前把关联对象一并加载。
"""

from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from sqlalchemy import select, func, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import load_only

from catalog.utils.errors import RepositoryFailure

T = TypeVar("T")


async def find_by_id(
    db: AsyncSession,
    model: type[T],
    entity_id: str,
    populate: Sequence[Any] = (),
) -> T | None:
    result = await db.execute(
        select(model).where(model.id == entity_id).options(*populate)
    )
    return result.scalar_one_or_none()


async def find_all(
    db: AsyncSession,
    model: type[T],
    *,
    where: Iterable[Any] = (),
    join: Sequence[Any] = (),
    fields: Sequence[Any] = (),
    order_by: Sequence[Any] = (),
    populate: Sequence[Any] = (),
) -> list[T]:
    """按条件查询全部记录；fields 为投影列，order_by 为排序列，join 为排序所需的外连接"""
    stmt = select(model)
    for target in join:
        stmt = stmt.outerjoin(target)
    stmt = stmt.where(*where)
    if fields:
        stmt = stmt.options(load_only(*fields))
    if populate:
        stmt = stmt.options(*populate)
    if order_by:
        stmt = stmt.order_by(*order_by)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count(db: AsyncSession, model: type, *where: Any) -> int:
    result = await db.execute(
        select(func.count()).select_from(model).where(*where)
    )
    return result.scalar()


async def insert(db: AsyncSession, entity: T) -> T:
    db.add(entity)
    await db.flush()
    return entity


async def update_by_id(
    db: AsyncSession,
    model: type[T],
    entity_id: str,
    values: dict[str, Any],
    populate: Sequence[Any] = (),
) -> T:
    """整条替换（保留原 ID）。记录不存在视为存储层失败，不会新建"""
    entity = await find_by_id(db, model, entity_id, populate)
    if entity is None:
        raise RepositoryFailure(f"{model.__name__} {entity_id} 不存在，无法更新")
    for key, value in values.items():
        setattr(entity, key, value)
    await db.flush()
    return entity


async def delete_by_id(db: AsyncSession, model: type, entity_id: str) -> bool:
    entity = await db.get(model, entity_id)
    if entity is None:
        return False
    await db.delete(entity)
    await db.flush()
    return True


def without_dependents(dependent_key: Any, entity_id: str) -> Any:
    """NOT EXISTS 条件：依赖表中没有指向 entity_id 的记录"""
    return ~select(dependent_key).where(dependent_key == entity_id).exists()


async def delete_if_no_dependents(
    db: AsyncSession,
    model: type,
    entity_id: str,
    dependent_key: Any,
) -> bool:
    """单条 DELETE ... WHERE NOT EXISTS，删除与依赖检查在同一语句内完成

    dependent_key 为依赖表上指向本表的外键列（如 BookInstance.book_id）。
    返回 False 表示记录不存在或仍有依赖。
    """
    result = await db.execute(
        delete(model)
        .where(model.id == entity_id, without_dependents(dependent_key, entity_id))
        .execution_options(synchronize_session=False)
    )
    return result.rowcount > 0


async def delete_where(db: AsyncSession, model: type, *where: Any) -> int:
    result = await db.execute(
        delete(model).where(*where).execution_options(synchronize_session=False)
    )
    return result.rowcount
