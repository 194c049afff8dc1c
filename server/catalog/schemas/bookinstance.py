from datetime import date

from pydantic import BaseModel

from catalog.schemas.book import BookBrief
from catalog.schemas.common import FieldError


class BookInstanceResponse(BaseModel):
    id: str
    book_id: str
    book: BookBrief | None = None
    imprint: str
    status: str
    due_back: date | None = None
    due_back_formatted: str = ""
    url: str


class BookInstanceDetailResponse(BaseModel):
    title: str
    bookinstance: BookInstanceResponse


class BookOption(BookBrief):
    checked: bool = False


class StatusOption(BaseModel):
    value: str
    checked: bool = False


class BookInstanceDraft(BaseModel):
    id: str | None = None
    book: str = ""
    imprint: str = ""
    status: str = ""
    due_back: date | str | None = None


class BookInstanceFormView(BaseModel):
    title: str
    book_list: list[BookOption]
    bookinstance_status: list[str]
    status_options: list[StatusOption]
    selected_book: str | None = None
    bookinstance: BookInstanceDraft | None = None
    errors: list[FieldError] = []


class BookInstanceDeleteView(BaseModel):
    title: str
    bookinstance: BookInstanceResponse
