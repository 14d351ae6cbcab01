"""Credential caching and personal access token issuance for DevOps tooling."""

__version__ = "0.1.0"
