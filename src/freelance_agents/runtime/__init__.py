"""Per-user agent runtime: domain models, storage, agents and orchestration."""
