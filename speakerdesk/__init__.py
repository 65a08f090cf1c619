"""Speakerdesk: deal pipeline and project lifecycle backend for a speaker bureau."""

__version__ = "1.0.0"
