"""
Shared infrastructure for the EcoLearn backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- logging: Process-wide logging setup

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings, parse_duration, validate_security_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    EcoLearnError,
    ValidationError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    ConfigurationError,
)
from .models import AuthenticatedUser

__all__ = [
    "Settings",
    "get_settings",
    "parse_duration",
    "validate_security_settings",
    "get_supabase_client",
    "reset_client_cache",
    "EcoLearnError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "ConfigurationError",
    "AuthenticatedUser",
]
