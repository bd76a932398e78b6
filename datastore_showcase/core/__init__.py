"""Core module - color math, reactive streams, and the seed palette."""
