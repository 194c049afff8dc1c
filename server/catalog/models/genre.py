import uuid

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base


class Genre(Base):
    __tablename__ = "genres"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)

    # 关联：删除类型时一并清除书籍上的引用行
    book_links = relationship(
        "BookGenre", back_populates="genre", cascade="all, delete-orphan"
    )


def genre_url(genre_id: str) -> str:
    return f"/catalog/genre/{genre_id}"
