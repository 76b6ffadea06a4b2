"""Streaming adapter tests."""
