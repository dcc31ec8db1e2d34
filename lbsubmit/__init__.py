"""Validate, classify and encode ListenBrainz listens."""
