"""fieldops: role-based permission engine and work-order workflow automation."""
