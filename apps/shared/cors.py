"""Centralized CORS configuration."""

import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def get_allowed_origins() -> list[str]:
    """Allowed origins from CORS_ORIGINS (comma separated). Defaults to all."""
    raw = os.getenv("CORS_ORIGINS", "*")
    origins = [origin.strip().rstrip("/") for origin in raw.split(",")]
    return [origin for origin in origins if origin]


def setup_cors(app: FastAPI) -> None:
    """Add CORS middleware to a FastAPI app."""
    origins = get_allowed_origins()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers refuse credentials with a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
