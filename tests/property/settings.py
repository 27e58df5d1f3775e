# tests/property/settings.py
"""Standardized Hypothesis settings profiles for property tests.

Provides consistent test intensity across all property test modules.
Import these instead of using inline @settings(max_examples=...).

Usage:
    from tests.property.settings import STANDARD_SETTINGS

    @given(values=st.lists(st.integers()))
    @STANDARD_SETTINGS
    def test_something(values):
        ...

Tiers:
- STANDARD_SETTINGS: 100 examples - Regular sync pipeline properties
- ASYNC_SETTINGS: 50 examples - Async pipelines (one event loop per example)
- QUICK_SETTINGS: 20 examples - Simple normalization and rejection checks
"""

from hypothesis import settings

# Standard property tests - good balance of coverage and speed
STANDARD_SETTINGS = settings(max_examples=100)

# Each async example runs its own event loop and action queues
ASYNC_SETTINGS = settings(max_examples=50)

# Quick validation tests - simple input rejection, normalization
QUICK_SETTINGS = settings(max_examples=20)
