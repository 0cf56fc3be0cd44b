"""Request context, structured logging, and in-process metrics.

Request IDs ride on structlog contextvars; collaborator calls and cache
lookups feed the metrics snapshot served at /api/metrics.
"""
