"""Mini README: HTTP interface for Dairy Ledger.

Exports the FastAPI application factory serving record submissions and
finance views. Other front ends (a CLI report, a sync worker) should live
alongside this module.
"""

from .web_app import create_application

__all__ = ["create_application"]
