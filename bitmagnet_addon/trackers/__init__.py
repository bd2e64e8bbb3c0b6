"""Tracker list caching."""
