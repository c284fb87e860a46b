"""
Shared data models used across modules.

These models are shared infrastructure, not business logic.
Module-specific models should stay in their respective module directories.
"""

from pydantic import BaseModel, Field


class AuthenticatedUser(BaseModel):
    """
    Represents an authenticated user in the system.

    This model is populated from access-token claims by the authentication
    gate and made available to route handlers and authorization guards via
    dependency injection. No database lookup is involved.
    """

    id: str = Field(..., description="User ID")
    email: str = Field(..., description="User's email address")
    role: str = Field(..., description="User role at the time the token was issued")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",  # Ignore extra fields from token claims
    }
