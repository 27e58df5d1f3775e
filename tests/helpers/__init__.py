"""Test helpers shared across unit and property tests."""
