import uuid
from datetime import date

from sqlalchemy import String, Date
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base
from catalog.utils.dates import format_medium_date


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    family_name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    date_of_death: Mapped[date | None] = mapped_column(Date)


# ─────────────────── 派生字段 ───────────────────


def author_name(first_name: str | None, family_name: str | None) -> str:
    """全名「姓, 名」；任一部分缺失时返回空串"""
    if not first_name or not family_name:
        return ""
    return f"{family_name}, {first_name}"


def author_lifespan(date_of_birth: date | None, date_of_death: date | None) -> str:
    """生卒年份区间：无卒日显示 Present，两者皆无返回 unknown"""
    if not date_of_birth and not date_of_death:
        return "unknown"
    lifespan = format_medium_date(date_of_birth) + " - "
    if date_of_death:
        lifespan += format_medium_date(date_of_death)
    else:
        lifespan += "Present"
    return lifespan


def author_url(author_id: str) -> str:
    return f"/catalog/author/{author_id}"
