"""Cache-first retrieval of assigned Jira issues.

Provides:
- Settings loaded from .env
- Structured logging
- The closed error taxonomy
- The issue service and a small CLI surface
"""
