"""Core module for configuration, exceptions, and shared utilities.

Patterns applied:
- Pydantic Settings with SettingsConfigDict
- Custom namespaced exceptions rooted at LibraryCatalogError
- One-time structlog configuration
"""
