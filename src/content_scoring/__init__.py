"""Content scoring package."""
