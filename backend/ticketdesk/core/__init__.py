"""Core application components: configuration, security, errors and dependencies."""
