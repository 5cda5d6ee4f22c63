"""Prometheus transport, response schemas and HTTP routes."""
