"""Transports that carry requests to the Jira server."""
