"""Domain entity models used for typed responses and shape validation.

Models are strict: a field present with the wrong JSON type fails instead of
being coerced ("1" is not an int). Unknown fields are allowed so that
validators only pin down the fields a test relies on.
"""

from pydantic import BaseModel, ConfigDict, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"

_ENTITY_CONFIG = ConfigDict(strict=True, extra="allow", populate_by_name=True)


class User(BaseModel):
    """User resource."""

    model_config = _ENTITY_CONFIG

    id: int = Field(gt=0)
    name: str = Field(min_length=1)
    username: str | None = None
    email: str | None = Field(default=None, pattern=EMAIL_PATTERN)
    phone: str | None = None
    website: str | None = None


class Post(BaseModel):
    """Post resource, owned by a user."""

    model_config = _ENTITY_CONFIG

    id: int = Field(gt=0)
    user_id: int = Field(alias="userId", gt=0)
    title: str
    body: str


class Comment(BaseModel):
    """Comment on a post."""

    model_config = _ENTITY_CONFIG

    id: int = Field(gt=0)
    post_id: int = Field(alias="postId", gt=0)
    name: str
    email: str = Field(pattern=EMAIL_PATTERN)
    body: str


class Todo(BaseModel):
    """Todo item, owned by a user."""

    model_config = _ENTITY_CONFIG

    id: int = Field(gt=0)
    user_id: int = Field(alias="userId", gt=0)
    title: str
    completed: bool
