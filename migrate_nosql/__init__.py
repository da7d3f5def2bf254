"""Schema-version upgrades for documents in a schemaless document store."""

__version__ = "1.0.0"
