"""
Feature modules for the EcoLearn backend.

Each module is self-contained with its own:
- interfaces.py: Protocol definitions for the module's public API
- models.py: Pydantic models for data transfer
- repository.py: Supabase data access
- exceptions.py: Module-specific exceptions

The auth module adds tokens.py, service.py, rbac.py and routes.py.
Modules communicate through interfaces, not concrete implementations.
"""
