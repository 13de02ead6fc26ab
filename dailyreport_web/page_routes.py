"""
Page routes.

The real screens are rendered by the front end; these placeholders give the
page gate something to guard.
"""

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(tags=["pages"])

_PAGE = "<!doctype html><html><head><title>{title}</title></head><body><h1>{title}</h1></body></html>"


@router.get("/", response_class=HTMLResponse)
async def home_page() -> str:
    return _PAGE.format(title="Daily Reports")


@router.get("/login", response_class=HTMLResponse)
async def login_page() -> str:
    return _PAGE.format(title="Login")


@router.get("/sales", response_class=HTMLResponse)
async def sales_page() -> str:
    return _PAGE.format(title="Sales Master")
