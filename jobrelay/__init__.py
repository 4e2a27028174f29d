"""Job Relay - retrying enqueue client for Postgres-backed work queues."""

__version__ = "1.0.0"
