"""
Command-line interface for polsalience.

Provides CLI commands for dictionary classification and validation.
"""

__all__ = ["classify", "validate"]
