"""Business logic for tasks app."""
