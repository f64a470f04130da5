"""SQLite persistence helpers."""
