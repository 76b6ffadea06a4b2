"""Test package for aicall."""
