"""Plain-text corpus helpers."""
