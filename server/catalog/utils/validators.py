"""表单字段校验与清洗

每条规则只读取原始输入中自己的字段，依次执行：去空白 → 转义 → 按 pydantic 类型校验。
某条规则失败只追加一条错误，不会中断后续规则，调用方一次拿到全部问题。
草稿只保存清洗后的值，原始值既不入库也不回显。
"""

from dataclasses import dataclass, field
from datetime import date
from functools import cached_property
from collections.abc import Mapping, Sequence
from typing import Annotated, Any, Optional

from pydantic import BeforeValidator, StringConstraints, TypeAdapter, ValidationError

from catalog.schemas.common import FieldError
from catalog.utils.dates import parse_iso_date

_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
    "\\": "&#x5C;",
    "`": "&#96;",
}
_ESCAPE_TABLE = str.maketrans(_ESCAPES)


def _iso_date(value: Any) -> Any:
    if isinstance(value, str):
        return parse_iso_date(value)
    return value


RequiredText = Annotated[str, StringConstraints(min_length=1)]
IsoDate = Annotated[date, BeforeValidator(_iso_date)]
OptionalDate = Optional[IsoDate]
IdList = list[str]


def bounded_text(max_length: int):
    return Annotated[str, StringConstraints(min_length=1, max_length=max_length)]


@dataclass(frozen=True)
class FieldRule:
    name: str
    message: str = ""
    annotation: Any = RequiredText
    default: Any = None
    repeatable: bool = False

    @cached_property
    def adapter(self) -> TypeAdapter:
        return TypeAdapter(self.annotation)


@dataclass
class ValidationResult:
    draft: dict[str, Any] = field(default_factory=dict)
    errors: list[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def escape(value: str) -> str:
    """转义 HTML 敏感字符 & < > " ' / \\ `"""
    return value.translate(_ESCAPE_TABLE)


def normalize_multi(raw: Any) -> list:
    """多选字段统一为列表：缺省 → []，单值 → [单值]，列表原样保留"""
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return [raw]


def _single(raw: Any) -> str:
    if raw is None:
        return ""
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else ""
    return str(raw)


def _sanitize(rule: FieldRule, raw: Any) -> Any:
    if rule.repeatable:
        return [escape(str(item).strip()) for item in normalize_multi(raw)]
    trimmed = _single(raw).strip()
    if not trimmed:
        return rule.default
    return escape(trimmed)


def _error_message(rule: FieldRule, value: Any, exc: ValidationError) -> str:
    if value is None or value == "":
        return rule.message or f"{rule.name} 不能为空"
    error = exc.errors()[0]
    ctx = error.get("ctx", {})
    if error["type"] == "string_too_long":
        return f"{rule.name} 长度不能超过 {ctx['max_length']} 个字符"
    if error["type"] == "literal_error":
        return f"{rule.name} 必须是以下之一: {ctx['expected']}"
    return rule.message or error["msg"]


def _apply_rule(rule: FieldRule, raw: Any, errors: list[FieldError]) -> Any:
    value = _sanitize(rule, raw)
    try:
        return rule.adapter.validate_python(value)
    except ValidationError as exc:
        errors.append(FieldError(field=rule.name, message=_error_message(rule, value, exc)))
        return "" if value is None else value


def validate_fields(raw: Mapping[str, Any], rules: Sequence[FieldRule]) -> ValidationResult:
    result = ValidationResult()
    for rule in rules:
        result.draft[rule.name] = _apply_rule(rule, raw.get(rule.name), result.errors)
    return result
