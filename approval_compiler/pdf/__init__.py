"""PDF geometry, classification, merging and fallback assembly."""
