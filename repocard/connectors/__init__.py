"""Data connectors for external APIs."""

from .github_connector import GitHubClient

__all__ = ["GitHubClient"]
