# tests/property/__init__.py
"""Property-based tests for foldline.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific examples we think of: a reduce is a left fold, a
pivot with one constant key is a plain reduce, and async pipelines agree
with their sync twins whatever the callback timing.

Test categories:
- engine/: Accumulator pipeline properties (sync and async)
"""
