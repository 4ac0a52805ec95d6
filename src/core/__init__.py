"""
Core library: transport-agnostic building blocks of the SSO client.

Modules:
    oauth2      - OAuth2 credential descriptors, token acquisition, cache and setup
    logging     - Structured JSON logging with correlation IDs
    errors      - Error classification and exception hierarchy
    utils       - JSON serialization helpers

Design Principles:
    - No knowledge of SSO resource endpoints or models
    - All modules are independently testable
    - Async-first where applicable
    - Type hints throughout
"""

from .types import ErrorCategory, ErrorClassifier

__version__ = "0.1.0"

__all__ = [
    "ErrorCategory",
    "ErrorClassifier",
]
