"""
Shared test fixtures

Points the document store at an in-memory SQLite database before any app
module is imported, and empties it between tests.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from apps.shared.database import SessionLocal
from apps.shared.documents import Document
from apps.blog.main import app


@pytest.fixture(autouse=True)
def clean_documents():
    yield
    db = SessionLocal()
    try:
        db.query(Document).delete()
        db.commit()
    finally:
        db.close()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
