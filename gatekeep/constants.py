"""Shared constants for gatekeep."""

# Reserved action value granting every action at the record's scope.
WILDCARD_ACTION = "all"

CALLER_KEY_PREFIX = "caller"
ROLE_KEY_PREFIX = "role"
