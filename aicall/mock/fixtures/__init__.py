"""Fixture catalog for the mock provider."""
