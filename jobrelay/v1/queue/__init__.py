"""
Enqueue client for Postgres-backed work queues.

This package provides:
- Ordered submission strategies (RPC first, direct table insert as fallback)
- Bounded retries with capped, jittered exponential backoff
- Structured results instead of exceptions for enqueue failures
- Postgres (SQLAlchemy) and Supabase (PostgREST) backend clients
"""
