"""
Unit Tests

Unit tests run in isolation without external services.
Redis is mocked; the database is an in-memory SQLite instance.

These tests are fast and can run without Docker or any services running.
"""
