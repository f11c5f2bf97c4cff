from datetime import datetime
from typing import Annotated, Any, ClassVar, Generic, TypeVar

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from blog_service.errors import ValidationError

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

NonEmptyStr = Annotated[str, Field(min_length=1)]

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class Column(Generic[T]):
    """Type-safe column reference for query conditions.

    Usage:
        class PostColumns(SchemaBase):
            published = Column[bool]("published")

        repo.where(PostColumns.published, True)
    """

    def __init__(self, column_name: str):
        self._column_name = column_name

    @property
    def column(self) -> str:
        """Return the underlying database column name."""
        return self._column_name

    def __str__(self) -> str:
        return self._column_name

    def __repr__(self) -> str:
        return f"Column({self._column_name})"


class SchemaBase:
    """Base class for column declarations of a table."""

    pass


class PostColumns(SchemaBase):
    id = Column[int]("id")
    title = Column[str]("title")
    content = Column[str]("content")
    author = Column[str]("author")
    slug = Column[str]("slug")
    published = Column[bool]("published")
    published_at = Column[datetime | None]("published_at")
    created_at = Column[datetime]("created_at")
    updated_at = Column[datetime]("updated_at")


class BaseEntity(BaseModel):
    """Base entity class for all database models."""

    model_config: ClassVar[ConfigDict] = ConfigDict(from_attributes=True)


class Post(BaseEntity):
    """A persisted blog post, one row of ``blog_posts``."""

    id: int
    title: str
    content: str
    author: str
    slug: str
    published: bool = False
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PostStats(BaseModel):
    total: int = 0
    published: int = 0
    drafts: int = 0
    average_words: int = 0


class DeleteResult(BaseModel):
    success: bool


# Procedure inputs


class ProcedureInput(BaseModel):
    """Base for decoded procedure input; values are not coerced between types."""

    model_config: ClassVar[ConfigDict] = ConfigDict(strict=True)


class PostCreate(ProcedureInput):
    title: NonEmptyStr
    content: NonEmptyStr
    author: NonEmptyStr
    published: bool = False


class PostUpdate(ProcedureInput):
    """Partial update; a field left as None is not touched."""

    title: NonEmptyStr | None = None
    content: NonEmptyStr | None = None
    author: NonEmptyStr | None = None
    published: bool | None = None


class PostFilter(ProcedureInput):
    """Equality filters for listing; None means "don't filter"."""

    published: bool | None = None
    author: str | None = None


class GetPostsInput(PostFilter):
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    offset: int = Field(default=0, ge=0)


class GetPostInput(ProcedureInput):
    id: int | None = None
    slug: str | None = None

    @model_validator(mode="after")
    def _require_key(self) -> "GetPostInput":
        if self.id is None and self.slug is None:
            raise ValueError("Either id or slug must be provided")
        return self


class UpdatePostInput(PostUpdate):
    id: int

    def changes(self) -> PostUpdate:
        return PostUpdate(**self.model_dump(exclude={"id"}, exclude_none=True))


class DeletePostInput(ProcedureInput):
    id: int


class PublishPostInput(ProcedureInput):
    id: int
    published: bool


def parse_input(model_class: type[M], data: Any) -> M:
    """Validate raw procedure input, raising our ``ValidationError`` on failure."""
    try:
        return model_class.model_validate({} if data is None else data)
    except pydantic.ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'input'}: {err['msg']}"
            for err in exc.errors()
        )
        raise ValidationError(details) from exc
