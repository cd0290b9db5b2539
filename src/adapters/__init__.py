"""Adapters that connect the core store contract to databases and host services."""
