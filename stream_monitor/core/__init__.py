"""Core package: configuration and lifecycle events."""
