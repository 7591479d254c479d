"""Core domain: models, ports, and history services."""
