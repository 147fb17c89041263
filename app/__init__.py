"""Gatekeeper: RBAC authorization decision engine and admin API."""
