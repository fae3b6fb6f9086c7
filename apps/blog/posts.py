"""
Blog post operations.

Validate input, call the document store and translate the outcome into a
response body or one of the API errors. Routes in main.py stay thin.
"""
import logging
from typing import Any, Dict, List

from pydantic import ValidationError as SchemaError

from apps.blog.schemas import BlogDocument, BlogPayload
from apps.shared.documents import DocumentStore, is_valid_id
from apps.shared.errors import (
    InvalidIdentifier,
    NotFound,
    ServerError,
    ValidationError,
    log_and_sanitize_error,
)

logger = logging.getLogger(__name__)

COLLECTION = "blogs"

REQUIRED_FIELDS_MESSAGE = "Title and body are required"
INVALID_ID_MESSAGE = "Provided blog ID is not valid"
NOT_FOUND_MESSAGE = "Blog post not found"


def _apply_schema(data: Dict[str, Any]) -> Dict[str, Any]:
    return BlogDocument(**data).model_dump()


def _require_title_and_body(payload: BlogPayload) -> None:
    if not payload.title or not payload.body:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)


def _parse_payload(raw: Any) -> BlogPayload:
    """Build the request payload from a raw JSON body. None counts as {}."""
    if raw is None:
        return BlogPayload()
    try:
        return BlogPayload.model_validate(raw)
    except SchemaError:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)


def _require_valid_id(post_id: str) -> str:
    if not is_valid_id(post_id):
        raise InvalidIdentifier(INVALID_ID_MESSAGE)
    return post_id.lower()


def create_post(store: DocumentStore, payload: BlogPayload) -> Dict[str, Any]:
    """Store a new post. Author falls back to "Anonymous"."""
    _require_title_and_body(payload)
    try:
        data = _apply_schema(payload.model_dump())
    except SchemaError:
        # e.g. a whitespace-only title
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)

    try:
        document = store.insert(data)
    except Exception as e:
        sanitized_msg, error_id = log_and_sanitize_error(
            e, "Create blog post", "Failed to create blog post"
        )
        raise ServerError(sanitized_msg)

    return document.to_dict()


def list_posts(store: DocumentStore) -> List[Dict[str, Any]]:
    """All posts, newest first."""
    try:
        documents = store.find(newest_first=True)
    except Exception as e:
        sanitized_msg, error_id = log_and_sanitize_error(
            e, "List blog posts", "Failed to fetch blog posts"
        )
        raise ServerError(sanitized_msg)

    return [document.to_dict() for document in documents]


def get_post(store: DocumentStore, post_id: str) -> Dict[str, Any]:
    post_id = _require_valid_id(post_id)
    try:
        document = store.find_by_id(post_id)
    except Exception as e:
        sanitized_msg, error_id = log_and_sanitize_error(
            e, "Fetch blog post", "Failed to fetch blog post"
        )
        raise ServerError(sanitized_msg)

    if document is None:
        raise NotFound(NOT_FOUND_MESSAGE)
    return document.to_dict()


def update_post(store: DocumentStore, post_id: str, raw_payload: Any) -> Dict[str, Any]:
    """
    Replace title and body of a post.

    Author is only touched when the request includes it; an empty or null
    author resets it to the default. The id is checked before the body is
    looked at.
    """
    post_id = _require_valid_id(post_id)
    payload = _parse_payload(raw_payload)
    _require_title_and_body(payload)

    changes = {"title": payload.title, "body": payload.body}
    if "author" in payload.model_fields_set:
        changes["author"] = payload.author

    try:
        document = store.update_by_id(post_id, changes, schema=_apply_schema)
    except SchemaError:
        raise ValidationError(REQUIRED_FIELDS_MESSAGE)
    except Exception as e:
        sanitized_msg, error_id = log_and_sanitize_error(
            e, "Update blog post", "Failed to update blog post"
        )
        raise ServerError(sanitized_msg)

    if document is None:
        raise NotFound(NOT_FOUND_MESSAGE)
    return document.to_dict()


def delete_post(store: DocumentStore, post_id: str) -> Dict[str, Any]:
    post_id = _require_valid_id(post_id)
    try:
        deleted = store.delete_by_id(post_id)
    except Exception as e:
        sanitized_msg, error_id = log_and_sanitize_error(
            e, "Delete blog post", "Failed to delete blog post"
        )
        raise ServerError(sanitized_msg)

    if deleted is None:
        raise NotFound(NOT_FOUND_MESSAGE)
    return {"message": "Blog post deleted successfully", "id": deleted["id"]}
