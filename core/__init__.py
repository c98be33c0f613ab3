"""Service wiring and process lifecycle."""
