"""
API Routers
Separate router modules for each domain.
"""

from app.routers import stage3

__all__ = ["stage3"]
