import uuid

from sqlalchemy import String, Text, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from catalog.database import Base


class Book(Base):
    __tablename__ = "books"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False, index=True)
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("authors.id"), nullable=False, index=True
    )
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    isbn: Mapped[str] = mapped_column(String(50), nullable=False)

    # 关联
    author = relationship("Author")
    genre_links = relationship(
        "BookGenre",
        back_populates="book",
        order_by="BookGenre.position",
        cascade="all, delete-orphan",
    )

    @property
    def genre_ids(self) -> list[str]:
        return [link.genre_id for link in self.genre_links]

    @property
    def genres(self) -> list:
        return [link.genre for link in self.genre_links if link.genre is not None]


class BookGenre(Base):
    """书籍-类型多对多关联，position 保留提交时的顺序"""

    __tablename__ = "book_genres"

    book_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("books.id"), primary_key=True
    )
    genre_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("genres.id"), primary_key=True, index=True
    )
    position: Mapped[int] = mapped_column(Integer, default=0)

    # 关联
    book = relationship("Book", back_populates="genre_links")
    genre = relationship("Genre", back_populates="book_links")


def book_url(book_id: str) -> str:
    return f"/catalog/book/{book_id}"
