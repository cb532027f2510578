"""Infrastructure layer: document store, security, background services."""
