"""Review Pilot AI: multi-tenant review aggregation and reply drafting."""

__version__ = "1.0.0"
