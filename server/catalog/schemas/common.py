from pydantic import BaseModel


class FieldError(BaseModel):
    field: str
    message: str


class CatalogCounts(BaseModel):
    book_count: int
    book_instance_count: int
    book_instance_available_count: int
    author_count: int
    genre_count: int


class CatalogIndexResponse(BaseModel):
    title: str
    data: CatalogCounts
