"""
CORS Configuration

Configures Cross-Origin Resource Sharing for the browser front end.
"""

import os
from dataclasses import dataclass, field, replace
from typing import List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


@dataclass
class CORSConfig:
    """CORS configuration settings."""

    allowed_origins: List[str] = field(default_factory=list)

    # Allow credentials (cookies, authorization headers)
    allow_credentials: bool = True

    allowed_methods: List[str] = field(default_factory=lambda: [
        "GET", "POST", "OPTIONS",
    ])

    allowed_headers: List[str] = field(default_factory=lambda: [
        "Accept",
        "Content-Type",
        "Authorization",
        "X-Request-ID",
    ])

    expose_headers: List[str] = field(default_factory=lambda: [
        "X-Request-ID",
    ])

    # Max age for preflight cache (in seconds)
    max_age: int = 3600

    # Allow all origins (development only!)
    allow_all_origins: bool = False


# Environment-specific configurations
CORS_CONFIGS = {
    "development": CORSConfig(
        allowed_origins=[
            "http://localhost:5173",      # Vite dev server
            "http://127.0.0.1:5173",
        ],
        allow_all_origins=True,
    ),
    "production": CORSConfig(
        allowed_origins=[],
        max_age=7200,
    ),
}


def get_cors_config(environment: Optional[str] = None) -> CORSConfig:
    """Get CORS configuration for the environment."""
    if environment is None:
        environment = os.getenv("BOOKSY_ENV", "development")

    base = CORS_CONFIGS.get(environment, CORS_CONFIGS["development"])
    config = replace(base, allowed_origins=list(base.allowed_origins))

    # Deployed front-end origins come from the environment
    extra_origins = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if extra_origins:
        config.allowed_origins.extend(
            origin.strip() for origin in extra_origins.split(",") if origin.strip()
        )

    return config


def setup_cors(app: FastAPI, config: Optional[CORSConfig] = None) -> None:
    """Add CORS middleware to the app."""
    if config is None:
        config = get_cors_config()

    if config.allow_all_origins:
        # Credentials cannot be combined with a literal "*"
        app.add_middleware(
            CORSMiddleware,
            allow_origin_regex=".*",
            allow_credentials=config.allow_credentials,
            allow_methods=config.allowed_methods,
            allow_headers=config.allowed_headers,
            expose_headers=config.expose_headers,
            max_age=config.max_age,
        )
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=config.allow_credentials,
        allow_methods=config.allowed_methods,
        allow_headers=config.allowed_headers,
        expose_headers=config.expose_headers,
        max_age=config.max_age,
    )
