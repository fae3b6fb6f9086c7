"""
Blog API

CRUD endpoints for blog posts stored in the document store.

Run locally with:
    python -m apps.blog.main
"""
import os
import logging
from typing import Any, Optional
from fastapi import FastAPI, APIRouter, Body, Depends
from sqlalchemy.orm import Session

from apps.shared.database import get_db, Base, engine, check_db_connection
from apps.shared.documents import DocumentStore
from apps.shared.cors import setup_cors
from apps.shared.errors import setup_error_handlers
from apps.blog import posts
from apps.blog.schemas import (
    BlogPayload,
    BlogResponse,
    DeleteResponse,
    MessageResponse,
)

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("blog-service")

# Create database tables
Base.metadata.create_all(bind=engine)
logger.info("Document store tables ready")

app = FastAPI(
    title="Blog API",
    version="1.0.0",
    description="Create, read, update and delete blog posts",
)

# Setup CORS from shared configuration
setup_cors(app)
setup_error_handlers(app, validation_message=posts.REQUIRED_FIELDS_MESSAGE)

router = APIRouter(prefix="/blogs", tags=["blogs"])


def get_store(db: Session = Depends(get_db)) -> DocumentStore:
    """Blog collection of the document store for the current request."""
    return DocumentStore(db, posts.COLLECTION)


@app.get("/", response_model=MessageResponse)
def root():
    """Liveness message."""
    return {"message": "Blog API is running"}


@app.get("/health")
def health():
    """Health check endpoint."""
    db_connected = check_db_connection()
    return {
        "status": "ok" if db_connected else "degraded",
        "service": "blog",
        "database": "connected" if db_connected else "disconnected",
    }


@router.post("", response_model=BlogResponse, status_code=201)
@router.post("/", response_model=BlogResponse, status_code=201, include_in_schema=False)
def create_blog(payload: Optional[BlogPayload] = None, store: DocumentStore = Depends(get_store)):
    """Create a new blog post. Requires title and body."""
    return posts.create_post(store, payload or BlogPayload())


@router.get("", response_model=list[BlogResponse])
@router.get("/", response_model=list[BlogResponse], include_in_schema=False)
def list_blogs(store: DocumentStore = Depends(get_store)):
    """List all blog posts, newest first."""
    return posts.list_posts(store)


@router.get("/{post_id}", response_model=BlogResponse)
def get_blog(post_id: str, store: DocumentStore = Depends(get_store)):
    return posts.get_post(store, post_id)


@router.put("/{post_id}", response_model=BlogResponse)
def update_blog(
    post_id: str,
    payload: Any = Body(None),
    store: DocumentStore = Depends(get_store),
):
    """Replace title, body and (if sent) author of a blog post."""
    return posts.update_post(store, post_id, payload)


@router.delete("/{post_id}", response_model=DeleteResponse)
def delete_blog(post_id: str, store: DocumentStore = Depends(get_store)):
    return posts.delete_post(store, post_id)


app.include_router(router)


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Server is running on http://localhost:{PORT}")
    uvicorn.run(app, host=HOST, port=PORT)
