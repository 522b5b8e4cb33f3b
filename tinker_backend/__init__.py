"""SQLite storage layer for users and lesson progress."""
