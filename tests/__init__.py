"""Test suite for diskcached.

Test Structure:
- unit/: Unit tests for individual components
  - io/: Filesystem abstractions
  - store/: Key-value store backends
  - caching/: Cached transform, invalidation and policies
  - config/: Config loading and env overrides
  - cli/: Command line interface
  - logging/: Logging configuration
- fixtures/: Shared store and producer doubles
- conftest.py: Shared fixtures and test configuration
"""
