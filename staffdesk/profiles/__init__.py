"""Profiles module — login identities, roles and leave balances."""

from staffdesk.profiles.models import Profile

__all__ = ["Profile"]
