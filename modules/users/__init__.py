"""Accounts, sign-in sessions and refresh-token rotation."""
