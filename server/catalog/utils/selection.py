"""关联选择状态：为候选实体标记是否已选中

返回新的只读视图，不修改查询得到的实体对象；比较按 ID 字符串相等进行。
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class SelectOption(Generic[T]):
    item: T
    checked: bool


def _default_key(candidate: Any) -> str:
    return str(candidate.id)


def build_selection(
    candidates: Sequence[T],
    selected_ids: Iterable[Any],
    key: Callable[[T], str] = _default_key,
) -> tuple[SelectOption[T], ...]:
    """按候选顺序返回 (实体, 是否选中)；选中列表里不存在的 ID 被忽略"""
    selected = {str(i) for i in selected_ids if i is not None}
    return tuple(SelectOption(item=c, checked=key(c) in selected) for c in candidates)
