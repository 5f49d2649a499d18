"""API views for core application."""
