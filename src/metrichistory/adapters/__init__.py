"""Adapters connecting the core to concrete storage."""
