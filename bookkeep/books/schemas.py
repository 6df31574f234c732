from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class Genre(str, Enum):
    FICTION = "Fiction"
    SCI_FI = "Sci-Fi"
    FANTASY = "Fantasy"
    ROMANCE = "Romance"
    MYSTERY = "Mystery"
    HISTORY = "History"
    BIOGRAPHY = "Biography"
    SELF_HELP = "Self-Help"


class BookStatus(str, Enum):
    """Reading status.

    Usual flow is unread -> reading -> finished, with abandoned reachable from
    unread or reading. The server accepts any value on update; keeping the
    flow sensible is left to the client.
    """

    UNREAD = "unread"
    READING = "reading"
    FINISHED = "finished"
    ABANDONED = "abandoned"


_camel = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    use_enum_values=True,
    str_strip_whitespace=True,
)


class BookCreateRequest(BaseModel):
    """Request schema for creating a book. ``id``, ``owner`` and ``dateAdded`` are server-side."""

    model_config = ConfigDict(**_camel, extra="ignore")

    title: str = Field(..., min_length=1, max_length=500, description="Book title")
    author: str = Field(..., min_length=1, max_length=300, description="Author name")
    total_pages: int = Field(..., ge=1, description="Total page count")
    current_page: int = Field(0, ge=0, description="Current page")
    genre: Genre
    status: BookStatus = BookStatus.UNREAD
    rating: Optional[int] = Field(None, ge=1, le=5)
    cover_url: Optional[str] = Field(None, max_length=2000)
    review: Optional[str] = Field(None, max_length=10000)
    date_finished: Optional[datetime] = None


class BookUpdateRequest(BaseModel):
    """Partial update. Only the fields listed here may change; anything else is rejected."""

    model_config = ConfigDict(**_camel, extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=500)
    author: Optional[str] = Field(None, min_length=1, max_length=300)
    total_pages: Optional[int] = Field(None, ge=1)
    current_page: Optional[int] = Field(None, ge=0)
    genre: Optional[Genre] = None
    status: Optional[BookStatus] = None
    rating: Optional[int] = Field(None, ge=1, le=5)
    cover_url: Optional[str] = Field(None, max_length=2000)
    review: Optional[str] = Field(None, max_length=10000)
    date_finished: Optional[datetime] = None

    @field_validator("title", "author", "total_pages", "current_page", "genre", "status", mode="before")
    @classmethod
    def not_null(cls, v):
        # these may be omitted but never cleared
        if v is None:
            raise ValueError("may not be null")
        return v

    def changes(self) -> dict:
        """Fields the caller actually sent, keyed by their external names."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class BookResponse(BaseModel):
    """Response schema for book"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, use_enum_values=True)

    id: str = Field(..., description="Book ID")
    owner: str = Field(..., description="Owner user ID")
    title: str
    author: str
    total_pages: int
    current_page: int = 0
    genre: Genre
    status: BookStatus
    rating: Optional[int] = None
    cover_url: Optional[str] = None
    review: Optional[str] = None
    date_added: datetime
    date_finished: Optional[datetime] = None

    @field_validator("id", "owner", mode="before")
    @classmethod
    def as_str(cls, v):
        return str(v) if v is not None else v
