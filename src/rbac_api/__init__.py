"""RBAC administration API."""
