"""Token verification."""
