"""
Utils module - Shared utilities for tier-placement

This module provides common utilities used across the project:
- logging_helper: Consistent logging setup
- paths: Common path definitions
- config: Placement thresholds and budget table, YAML overrides
- io_helpers: BOM-safe UTF-8 and JSON file I/O
"""
