"""
Core modules for the club ledger portal.

This package contains:
- config: Application configuration and settings
- exceptions: Custom exception classes
- logger: Logging configuration
- parsing: CSV snapshot parsing
- phone: Phone number normalization
- schema: Pydantic models for records, requests and responses
- sessions: In-memory session registry
- store: Raw text access to the CSV snapshots
"""
