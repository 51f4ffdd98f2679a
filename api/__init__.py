"""
FastAPI application for the certification records module.

This package contains the REST API over the certification services.
"""

__version__ = "1.0.0"
