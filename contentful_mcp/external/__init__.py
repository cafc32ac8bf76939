"""Contentful Management API access: client, retry and error classification."""
