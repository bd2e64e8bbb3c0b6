"""Bitmagnet GraphQL access."""
