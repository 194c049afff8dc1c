from pydantic import BaseModel

from catalog.schemas.common import FieldError


class GenreResponse(BaseModel):
    id: str
    name: str
    url: str


class GenreOption(GenreResponse):
    checked: bool = False


class GenreBook(BaseModel):
    id: str
    title: str
    summary: str | None = None
    url: str


class GenreDetailResponse(BaseModel):
    title: str
    genre: GenreResponse
    genre_books: list[GenreBook]


class GenreDraft(BaseModel):
    id: str | None = None
    name: str = ""


class GenreFormView(BaseModel):
    title: str
    genre: GenreDraft | None = None
    errors: list[FieldError] = []


class GenreDeleteView(BaseModel):
    title: str
    genre: GenreResponse
    genre_books: list[GenreBook]
