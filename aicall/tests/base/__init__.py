"""Unit tests for aicall.base building blocks."""
