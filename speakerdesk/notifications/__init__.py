"""Outbound Slack notifications."""
