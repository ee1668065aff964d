"""Test configuration package: markers and shared helpers."""
