"""
Pydantic schemas for the Blog API.

Request payloads, the stored document schema and response models.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

DEFAULT_AUTHOR = "Anonymous"


class BlogPayload(BaseModel):
    """
    Request body for create and update.

    Every field is optional here so that missing title/body is reported
    with our own validation error instead of a schema error.
    """
    title: Optional[str] = None
    body: Optional[str] = None
    author: Optional[str] = None


class BlogDocument(BaseModel):
    """Schema every stored blog post must satisfy."""
    title: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    author: str = DEFAULT_AUTHOR

    class Config:
        str_strip_whitespace = True
        extra = "ignore"

    @field_validator("author", mode="before")
    @classmethod
    def default_author(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_AUTHOR
        return value


class BlogResponse(BaseModel):
    """Schema for blog post responses."""
    id: str
    title: str
    body: str
    author: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    class Config:
        populate_by_name = True


class DeleteResponse(BaseModel):
    """Response after a blog post is deleted."""
    message: str
    id: str


class MessageResponse(BaseModel):
    message: str
