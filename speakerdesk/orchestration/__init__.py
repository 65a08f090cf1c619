"""Deal lifecycle orchestration."""
