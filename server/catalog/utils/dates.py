"""日期解析与展示格式"""

from datetime import date

from dateutil.parser import isoparse


def parse_iso_date(value: str) -> date:
    """严格按 ISO-8601 解析日期，非法日历日期（如 2024-02-30）抛 ValueError"""
    return isoparse(value).date()


def format_medium_date(value: date | None) -> str:
    """中等长度日期格式，如 Oct 6, 2014；空值返回空串"""
    if value is None:
        return ""
    return f"{value:%b} {value.day}, {value.year}"


def to_iso(value: date | None) -> str | None:
    return value.isoformat() if value else None
