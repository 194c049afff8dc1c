from datetime import date

from pydantic import BaseModel

from catalog.schemas.author import AuthorSummary
from catalog.schemas.common import FieldError
from catalog.schemas.genre import GenreOption, GenreResponse


class BookBrief(BaseModel):
    id: str
    title: str
    url: str


class BookListItem(BookBrief):
    author: AuthorSummary | None = None


class BookResponse(BookBrief):
    author_id: str
    author: AuthorSummary | None = None
    summary: str
    isbn: str
    genre: list[GenreResponse] = []
    genre_ids: list[str] = []


class BookInstanceSummary(BaseModel):
    id: str
    imprint: str
    status: str
    due_back: date | None = None
    due_back_formatted: str = ""
    url: str


class BookDetailResponse(BaseModel):
    title: str
    book: BookResponse
    book_instances: list[BookInstanceSummary]


class AuthorOption(AuthorSummary):
    checked: bool = False


class BookDraft(BaseModel):
    id: str | None = None
    title: str = ""
    author: str = ""
    summary: str = ""
    isbn: str = ""
    genre: list[str] = []


class BookFormView(BaseModel):
    title: str
    authors: list[AuthorOption]
    genres: list[GenreOption]
    book: BookDraft | None = None
    errors: list[FieldError] = []


class BookDeleteView(BaseModel):
    title: str
    book: BookResponse
    book_instances: list[BookInstanceSummary]
