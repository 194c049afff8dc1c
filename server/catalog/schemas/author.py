from datetime import date

from pydantic import BaseModel

from catalog.schemas.common import FieldError


class AuthorSummary(BaseModel):
    id: str
    first_name: str
    family_name: str
    name: str
    url: str


class AuthorResponse(AuthorSummary):
    date_of_birth: date | None
    date_of_death: date | None
    date_of_birth_iso: str | None
    date_of_death_iso: str | None
    lifespan: str


class AuthorBook(BaseModel):
    id: str
    title: str
    summary: str | None = None
    url: str


class AuthorDetailResponse(BaseModel):
    title: str
    author: AuthorResponse
    author_books: list[AuthorBook]


class AuthorDraft(BaseModel):
    """表单回显用草稿；日期校验失败时保留清洗后的字符串"""
    id: str | None = None
    first_name: str = ""
    family_name: str = ""
    date_of_birth: date | str | None = None
    date_of_death: date | str | None = None


class AuthorFormView(BaseModel):
    title: str
    author: AuthorDraft | None = None
    errors: list[FieldError] = []


class AuthorDeleteView(BaseModel):
    title: str
    author: AuthorResponse
    author_books: list[AuthorBook]
