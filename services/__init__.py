"""Token and session issuers."""
