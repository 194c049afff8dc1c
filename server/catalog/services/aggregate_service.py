"""并发聚合查询

把一组相互独立的查询并发执行，按 key 合并为一个结果字典。
任一子查询失败即取消其余查询并原样抛出该异常，不返回部分结果。
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = logging.getLogger(__name__)

Fetch = Callable[[AsyncSession], Awaitable[Any]]


async def _run_fetch(session_factory: async_sessionmaker[AsyncSession], fetch: Fetch) -> Any:
    # AsyncSession 不支持并发使用，每个子查询独占一个会话
    async with session_factory() as db:
        return await fetch(db)


async def aggregate(
    session_factory: async_sessionmaker[AsyncSession],
    fetches: Mapping[str, Fetch],
) -> dict[str, Any]:
    if not fetches:
        return {}

    tasks = {
        key: asyncio.ensure_future(_run_fetch(session_factory, fetch))
        for key, fetch in fetches.items()
    }
    try:
        done, pending = await asyncio.wait(
            tasks.values(), return_when=asyncio.FIRST_EXCEPTION
        )
    except asyncio.CancelledError:
        # 调用方被取消（如客户端断开）时子查询一并取消，并等待其释放会话
        for task in tasks.values():
            task.cancel()
        await asyncio.gather(*tasks.values(), return_exceptions=True)
        raise

    errors = {
        key: task.exception()
        for key, task in tasks.items()
        if task in done and not task.cancelled() and task.exception() is not None
    }
    if errors:
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        failed_key, exc = next(iter(errors.items()))
        logger.error(f"[聚合查询] 子查询 {failed_key} 失败: {exc!r}")
        raise exc

    return {key: task.result() for key, task in tasks.items()}
