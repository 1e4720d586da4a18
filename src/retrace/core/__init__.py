"""Core infrastructure: event bus and configuration."""
