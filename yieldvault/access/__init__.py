"""Capability checks for administrative vault operations."""

from yieldvault.access.roles import Role, RoleGate

__all__ = ["Role", "RoleGate"]
