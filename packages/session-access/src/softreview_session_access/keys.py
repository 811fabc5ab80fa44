"""Key patterns for session storage.

All keys use the `sr:` prefix. Key functions are pure: they compute key
names, never touch Redis.

Two scopes exist, matching what a browser offers:
  - tab: lives as long as one tab (the pending-action slot)
  - browser: survives closing the tab (the credential token)
"""


def pending_action_key(tab_id: str) -> str:
    """The single pending-action slot of a tab. Last write wins."""
    return f"sr:tab:{tab_id}:pending_action"


def credential_key(browser_id: str) -> str:
    """The bearer token of whoever is signed in on this browser."""
    return f"sr:browser:{browser_id}:credential"
