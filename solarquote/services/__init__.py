"""
services/ — Business logic for the marketplace.

Routers validate input and resolve the caller; services own the rules,
transactions and side effects, and raise errors.MarketplaceError
subclasses on failure.
"""
