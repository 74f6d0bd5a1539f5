"""Filter policy parsing and application."""
