"""API Access — typed async client for the directory REST API."""
