"""Shared contract types for the SoftReview directory client.

Provides the Pydantic models that flow between the API client, the session
store, the auth session and the review manager.
"""
