"""
Web layer for the sales daily report system.

create_app() builds the FastAPI application:
- dailyreport_web.auth_routes   /api/auth (login, logout, session)
- dailyreport_web.sales_routes  /api/sales (manager only)
- dailyreport_web.page_routes   page placeholders behind the page gate
"""

from .app import create_app

__all__ = ["create_app"]
