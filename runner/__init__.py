"""End-to-end smoke runner for a live token broker."""
