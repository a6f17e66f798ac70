"""Versioned wire contracts.

Each served version lives in its own module (`booking_v1`, later
`booking_v2`, ...) and is never edited in a breaking way once published;
see `evolution.find_breaking_changes`.
"""
