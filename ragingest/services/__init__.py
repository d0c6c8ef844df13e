"""Business logic for ragingest."""
