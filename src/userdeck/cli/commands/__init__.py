"""CLI command implementations for UserDeck.

This module contains the command group implementations:
- users: List, search and browse users
- cache: Inspect and clear the local user cache
- config: Manage configuration
"""
