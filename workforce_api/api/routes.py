# NOTE: no `from __future__ import annotations` here. FastAPI must see the
# request-body classes chosen inside build_resource_router as real objects.

from typing import Any, Dict, List, Optional, Sequence

from fastapi import APIRouter, Depends

from workforce_api.context import AppContext, get_context
from workforce_api.errors import NotFound, storage_errors
from workforce_api.resources.base import (
    Resource,
    delete_row,
    fetch_row,
    insert_row,
    list_page,
    parse_id,
    update_row,
)
from workforce_api.resources.registry import EMPLOYEES, SCHEDULES
from workforce_api.resources.schedules import (
    employee_exists,
    parse_date_range,
    roster_page,
    schedules_for_employee,
)
from workforce_api.util.pagination import get_pagination, page_meta


def build_resource_router(
    res: Resource,
    *,
    dependencies: Sequence[Any] = (),
    include_list: bool = True,
) -> APIRouter:
    """list / get / create / update / delete routes for one resource."""

    router = APIRouter(
        prefix=f"/api/{res.plural}",
        tags=[res.plural],
        dependencies=list(dependencies),
    )
    CreateBody = res.model
    PatchBody = res.patch_model

    def _errors(action: str):
        return storage_errors(
            action,
            duplicate_message=res.duplicate_message,
            in_use_message=res.in_use_message,
        )

    if include_list:

        @router.get("")
        def list_items(
            page: Optional[str] = None,
            limit: Optional[str] = None,
            search: Optional[str] = None,
            ctx: AppContext = Depends(get_context),
        ) -> Dict[str, Any]:
            p = get_pagination({"page": page, "limit": limit})
            with _errors(f"fetching {res.plural}"):
                with ctx.db.connect() as conn:
                    rows, total = list_page(conn, res, p, search)
            return {"data": rows, "meta": page_meta(p, total)}

    @router.get("/{item_id}")
    def get_item(item_id: str, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
        row_id = parse_id(item_id, res)
        with _errors(f"fetching {res.name}"):
            with ctx.db.connect() as conn:
                row = fetch_row(conn, res, row_id)
        if row is None:
            raise NotFound(f"{res.title} not found")
        return row

    @router.post("", status_code=201)
    def create_item(payload: CreateBody, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
        data = payload.model_dump(mode="json", exclude_unset=True)
        with _errors(f"creating {res.name}"):
            with ctx.db.connect() as conn:
                new_id = insert_row(conn, res, data)
        return {"message": f"{res.title} created successfully", "id": new_id}

    @router.patch("/{item_id}")
    def update_item(
        item_id: str,
        payload: PatchBody,
        ctx: AppContext = Depends(get_context),
    ) -> Dict[str, Any]:
        row_id = parse_id(item_id, res)
        patch = payload.model_dump(mode="json", exclude_unset=True)
        with _errors(f"updating {res.name}"):
            with ctx.db.connect() as conn:
                touched = update_row(conn, res, row_id, patch)
        if touched == 0:
            raise NotFound(f"{res.title} not found")
        return {"message": f"{res.title} updated successfully"}

    @router.delete("/{item_id}")
    def delete_item(item_id: str, ctx: AppContext = Depends(get_context)) -> Dict[str, Any]:
        row_id = parse_id(item_id, res)
        with _errors(f"deleting {res.name}"):
            with ctx.db.connect() as conn:
                deleted = delete_row(conn, res, row_id)
        if deleted == 0:
            raise NotFound(f"{res.title} not found")
        return {"message": f"{res.title} deleted successfully"}

    return router


def build_schedules_router(*, dependencies: Sequence[Any] = ()) -> APIRouter:
    """Schedules: the standard item routes plus the roster views."""

    router = build_resource_router(SCHEDULES, dependencies=dependencies, include_list=False)

    @router.get("")
    def schedules_roster(
        start: Optional[str] = None,
        end: Optional[str] = None,
        page: Optional[str] = None,
        limit: Optional[str] = None,
        search: Optional[str] = None,
        ctx: AppContext = Depends(get_context),
    ) -> Dict[str, Any]:
        """Active employees (by name) with their schedules between start and end."""
        start_date, end_date = parse_date_range(start, end)
        p = get_pagination({"page": page, "limit": limit})
        with storage_errors("fetching schedules"):
            with ctx.db.connect() as conn:
                data, total = roster_page(conn, p, search, start_date, end_date)
        return {"data": data, "meta": page_meta(p, total)}

    @router.get("/employee/{employee_id}")
    def schedules_by_employee(
        employee_id: str,
        ctx: AppContext = Depends(get_context),
    ) -> List[Dict[str, Any]]:
        eid = parse_id(employee_id, EMPLOYEES)
        with storage_errors("fetching schedules"):
            with ctx.db.connect() as conn:
                if not employee_exists(conn, eid):
                    raise NotFound("Employee not found")
                return schedules_for_employee(conn, eid)

    return router
