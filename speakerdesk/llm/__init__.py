"""LLM-backed CRM assistant."""
