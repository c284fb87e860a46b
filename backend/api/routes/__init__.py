"""HTTP route modules mounted by the application factory."""
