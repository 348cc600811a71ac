"""Business logic for accounts app."""
