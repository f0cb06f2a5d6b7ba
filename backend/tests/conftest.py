"""Root conftest: set env vars BEFORE any chatstate module is imported.

pydantic-settings reads the environment when chatstate.core.config is first
imported, so overrides must be set here at module level.
"""
import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("MAX_SESSIONS", "50")
