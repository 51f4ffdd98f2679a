"""
Service layer for the certification records module.

This package contains framework-agnostic business logic that can be used
by the CLI, the API, the views or any other interface.
"""

__version__ = "1.0.0"
