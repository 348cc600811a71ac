"""Business logic for recruitment app."""
