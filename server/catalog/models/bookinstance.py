import uuid
from datetime import date

from sqlalchemy import String, Date, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base

# 副本状态：封闭集合
BOOK_INSTANCE_STATUSES: tuple[str, ...] = ("Available", "Maintenance", "Loaned", "Reserved")
DEFAULT_BOOK_INSTANCE_STATUS = "Maintenance"


def bookinstance_status_choices() -> list[str]:
    """表单下拉框使用的状态列表"""
    return list(BOOK_INSTANCE_STATUSES)


class BookInstance(Base):
    __tablename__ = "book_instances"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id"), nullable=False, index=True
    )
    imprint: Mapped[str] = mapped_column(String(500), nullable=False)
    status: Mapped[str] = mapped_column(
        SAEnum(*BOOK_INSTANCE_STATUSES, name="bookinstance_status"),
        nullable=False,
        default=DEFAULT_BOOK_INSTANCE_STATUS,
    )
    due_back: Mapped[date | None] = mapped_column(Date)

    # 关联
    book = relationship("Book")


def bookinstance_url(instance_id: str) -> str:
    return f"/catalog/bookinstance/{instance_id}"
