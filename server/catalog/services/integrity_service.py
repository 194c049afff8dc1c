"""删除前的引用完整性检查

检查与删除不是原子的：检查之后、删除之前可能有新的依赖记录写入。
书籍删除另外通过 repository.delete_if_no_dependents 在单条语句内复核。
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.services.aggregate_service import Fetch, aggregate


@dataclass(frozen=True)
class DeletionDecision:
    parent: Any
    blockers: Sequence[Any] = field(default_factory=tuple)

    @property
    def blocked(self) -> bool:
        return len(self.blockers) > 0


def guard_deletion(parent: Any, dependents: Sequence[Any]) -> DeletionDecision:
    """有依赖则返回 blocked 决定（携带全部依赖供展示），否则允许删除"""
    return DeletionDecision(parent=parent, blockers=tuple(dependents))


async def check_dependents(
    session_factory: async_sessionmaker[AsyncSession],
    fetch_parent: Fetch,
    fetch_dependents: Fetch,
) -> DeletionDecision:
    """并发查询父记录及其依赖，返回删除决定；父记录不存在时 parent 为 None"""
    results = await aggregate(session_factory, {
        "parent": fetch_parent,
        "dependents": fetch_dependents,
    })
    return guard_deletion(results["parent"], results["dependents"])
