"""Shared utilities used across issuescope packages."""
