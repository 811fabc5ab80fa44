"""Auth — the identity of the person using the directory, and how it changes."""
