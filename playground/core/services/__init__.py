"""Application services (music metadata, CLI parser comparison)."""
