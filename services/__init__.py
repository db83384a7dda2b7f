"""
Service layer for business logic.

This package contains service classes behind the API routes:
phone allow-list authentication with session handling, and the
transaction read model that feeds the dashboard.
"""
