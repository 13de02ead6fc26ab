"""
FastAPI routes for the sales master (manager only).

Prefix: /api/sales

- GET    /           filtered, paginated list
- POST   /           create
- GET    /{sales_id} detail
- PUT    /{sales_id} update (sales code is fixed; password optional)
- DELETE /{sales_id} delete
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi import Path as PathParam
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, EmailStr, Field

from dailyreport.auth.models import SessionData
from dailyreport.auth.passwords import hash_password, validate_password
from dailyreport.models.sales import SalesRecord
from dailyreport.utils.exceptions import NotFoundError, ValidationError
from dailyreport.utils.logger import get_logger
from .auth_middleware import carry_session_cookie, require_manager_role

logger = get_logger(__name__)

router = APIRouter(prefix="/api/sales", tags=["sales"])

# Record ids are uuid4 hex strings
SALES_ID_PATTERN = r"^[0-9a-f]{32}$"


class CreateSalesRequest(BaseModel):
    sales_code: str = Field(min_length=1, max_length=20, pattern=r"^[a-zA-Z0-9]+$")
    sales_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str
    department: str = Field(min_length=1, max_length=50)
    manager_id: Optional[str] = None
    is_manager: bool = False


class UpdateSalesRequest(BaseModel):
    sales_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: Optional[str] = None
    department: str = Field(min_length=1, max_length=50)
    manager_id: Optional[str] = None
    is_manager: bool = False


def _to_public(record: SalesRecord, manager: Optional[SalesRecord] = None) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "sales_id": record.id,
        "sales_code": record.sales_code,
        "sales_name": record.sales_name,
        "email": record.email,
        "department": record.department,
        "is_manager": record.is_manager,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }
    if manager is not None:
        out["manager"] = {"sales_id": manager.id, "sales_name": manager.sales_name}
    return out


async def _resolve_manager(store, manager_id: Optional[str]) -> Optional[SalesRecord]:
    """Look up the record named as manager; it must exist and be a manager."""
    if not manager_id:
        return None
    boss = await run_in_threadpool(store.find_by_id, manager_id)
    if boss is None:
        raise ValidationError(details=[{"field": "manager_id", "message": "Manager does not exist"}])
    if not boss.is_manager:
        raise ValidationError(
            details=[{"field": "manager_id", "message": "The specified sales record is not a manager"}]
        )
    return boss


def _check_password_policy(password: str) -> None:
    policy = validate_password(password)
    if not policy.valid:
        raise ValidationError(
            details=[{"field": "password", "message": msg} for msg in policy.errors],
        )


@router.get("")
async def list_sales(
    request: Request,
    sales_name: Optional[str] = None,
    sales_code: Optional[str] = None,
    department: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: SessionData = Depends(require_manager_role),
) -> Dict[str, Any]:
    """List sales records with filters and pagination."""
    store = request.app.state.sales_store
    items, total = await run_in_threadpool(
        store.list_sales,
        sales_name=sales_name,
        sales_code=sales_code,
        department=department,
        page=page,
        limit=limit,
    )
    by_id = {s.id: s for s in await run_in_threadpool(store.load_all)}

    return {
        "status": "success",
        "data": {
            "items": [_to_public(s, by_id.get(s.manager_id or "")) for s in items],
            "pagination": {
                "current_page": page,
                "total_pages": math.ceil(total / limit),
                "total_items": total,
                "limit": limit,
            },
        },
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_sales(
    request: Request,
    body: CreateSalesRequest,
    current_user: SessionData = Depends(require_manager_role),
) -> Dict[str, Any]:
    """
    Create a sales record.

    The password must satisfy the password policy; sales code and email
    must be unused (409 otherwise).
    """
    _check_password_policy(body.password)

    store = request.app.state.sales_store
    boss = await _resolve_manager(store, body.manager_id)

    password_hash = await run_in_threadpool(hash_password, body.password)
    record = SalesRecord(
        sales_code=body.sales_code,
        sales_name=body.sales_name,
        email=str(body.email),
        password_hash=password_hash,
        department=body.department,
        is_manager=body.is_manager,
        manager_id=body.manager_id,
    )
    created = await run_in_threadpool(store.create, record)
    logger.info("Sales created by manager", sales_id=created.id, created_by=current_user.sales_id)

    return {"status": "success", "data": _to_public(created, boss)}


@router.get("/{sales_id}")
async def get_sales(
    request: Request,
    sales_id: str = PathParam(pattern=SALES_ID_PATTERN),
    current_user: SessionData = Depends(require_manager_role),
) -> Dict[str, Any]:
    """Single sales record with its manager."""
    store = request.app.state.sales_store
    record = await run_in_threadpool(store.find_by_id, sales_id)
    if record is None:
        raise NotFoundError("Sales record not found")
    boss = await run_in_threadpool(store.find_by_id, record.manager_id) if record.manager_id else None
    return {"status": "success", "data": _to_public(record, boss)}


@router.put("/{sales_id}")
async def update_sales(
    request: Request,
    body: UpdateSalesRequest,
    sales_id: str = PathParam(pattern=SALES_ID_PATTERN),
    current_user: SessionData = Depends(require_manager_role),
) -> Dict[str, Any]:
    """
    Update a sales record.

    The sales code cannot change. A password is only sent when it is being
    changed; it must satisfy the password policy and is re-hashed.

    Response:
        { "status": "success", "data": { "sales_id": "...", "updated_at": "..." } }
    """
    store = request.app.state.sales_store
    if await run_in_threadpool(store.find_by_id, sales_id) is None:
        raise NotFoundError("Sales record not found")

    if body.password:
        _check_password_policy(body.password)
    if body.manager_id == sales_id:
        raise ValidationError(
            details=[{"field": "manager_id", "message": "A sales record cannot be its own manager"}]
        )
    await _resolve_manager(store, body.manager_id)

    changes: Dict[str, Any] = {
        "sales_name": body.sales_name,
        "email": str(body.email),
        "department": body.department,
        "manager_id": body.manager_id or None,
        "is_manager": body.is_manager,
    }
    if body.password:
        changes["password_hash"] = await run_in_threadpool(hash_password, body.password)

    updated = await run_in_threadpool(store.update, sales_id, **changes)
    logger.info("Sales updated by manager", sales_id=sales_id, updated_by=current_user.sales_id)

    return {"status": "success", "data": {"sales_id": updated.id, "updated_at": updated.updated_at}}


@router.delete("/{sales_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sales(
    request: Request,
    sales_id: str = PathParam(pattern=SALES_ID_PATTERN),
    current_user: SessionData = Depends(require_manager_role),
) -> Response:
    """Delete a sales record (204). Its subordinates are left without a manager."""
    store = request.app.state.sales_store
    await run_in_threadpool(store.delete, sales_id)
    logger.info("Sales deleted by manager", sales_id=sales_id, deleted_by=current_user.sales_id)
    return carry_session_cookie(request, Response(status_code=status.HTTP_204_NO_CONTENT))
