"""Infrastructure adapters: credential storage and logging setup."""
