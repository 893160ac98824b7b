"""
Core application utilities.

This package provides:
- Application-level settings (separate from DB settings)
- Logging configuration with request/company context
- Domain exceptions mapped to HTTP responses
- Security helpers and dependencies (current user, company scope, role checks)
"""
