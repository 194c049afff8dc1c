from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.models.author import Author
from catalog.models.book import Book
from catalog.models.bookinstance import BookInstance
from catalog.models.genre import Genre
from catalog.schemas.common import CatalogCounts, CatalogIndexResponse
from catalog.services import repository
from catalog.services.aggregate_service import aggregate


async def get_catalog_index(session_factory: async_sessionmaker[AsyncSession]) -> CatalogIndexResponse:
    """首页统计：五个计数并发查询"""
    counts = await aggregate(session_factory, {
        "book_count": lambda db: repository.count(db, Book),
        "book_instance_count": lambda db: repository.count(db, BookInstance),
        "book_instance_available_count": lambda db: repository.count(
            db, BookInstance, BookInstance.status == "Available"
        ),
        "author_count": lambda db: repository.count(db, Author),
        "genre_count": lambda db: repository.count(db, Genre),
    })
    return CatalogIndexResponse(title="Local Library Home", data=CatalogCounts(**counts))
