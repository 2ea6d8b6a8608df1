"""IO adapters: local filesystem, HTTP completion client, payload validation."""
