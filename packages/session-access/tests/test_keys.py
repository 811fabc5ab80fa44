"""Verify session key patterns are scoped and stable."""

from softreview_session_access.keys import credential_key, pending_action_key


def test_pending_action_key_is_per_tab() -> None:
    assert pending_action_key("tab-1") == "sr:tab:tab-1:pending_action"
    assert pending_action_key("tab-1") != pending_action_key("tab-2")


def test_pending_action_key_is_not_per_product() -> None:
    """One slot per tab: the key takes no product argument at all."""
    assert pending_action_key("tab-1") == pending_action_key("tab-1")


def test_credential_key_is_per_browser() -> None:
    assert credential_key("browser-9") == "sr:browser:browser-9:credential"


def test_all_keys_share_prefix() -> None:
    for key in (pending_action_key("t"), credential_key("b")):
        assert key.startswith("sr:")
