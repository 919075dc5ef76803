"""Core configuration, data model and orchestration."""
