"""Core: settings, logging, error types, FastAPI dependencies."""
