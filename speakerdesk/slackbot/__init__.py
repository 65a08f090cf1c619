"""Slack interactivity and slash command handling."""
