# Overview: Flask API routes for catalog operations; parses input and returns JSON responses.

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_permission
from ..errors import AppError, InternalError
from ..responses import error_response, success_response
from ..services import get_services


catalogs_bp = Blueprint("catalogs", __name__, url_prefix="/api/catalogs")


def _with_counts(catalog) -> dict:
    payload = catalog.to_dict()
    payload["rollCount"] = get_services().catalogs.get_roll_count(catalog.id)
    return payload


@catalogs_bp.get("")
@require_auth
@require_permission("catalogs:read")
def list_catalogs_route():
    """
    List non-deleted catalogs by name.

    Query parameters:
    - status: active / archived / draft
    - search: substring of code, name or material
    """
    filters = {
        "status": request.args.get("status"),
        "search": request.args.get("search"),
    }
    try:
        catalogs = get_services().catalogs.get_all(filters)
        return success_response([c.to_dict() for c in catalogs])
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list catalogs")
        return error_response(InternalError())


@catalogs_bp.get("/materials")
@require_auth
@require_permission("catalogs:read")
def list_materials_route():
    try:
        return success_response(get_services().catalogs.get_materials())
    except Exception:
        current_app.logger.exception("Failed to list materials")
        return error_response(InternalError())


@catalogs_bp.get("/<catalog_id>")
@require_auth
@require_permission("catalogs:read")
def get_catalog_route(catalog_id: str):
    """Single catalog, with the number of rolls referencing it as `rollCount`."""
    try:
        catalog = get_services().catalogs.get_by_id(catalog_id)
        return success_response(_with_counts(catalog))
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get catalog")
        return error_response(InternalError())


@catalogs_bp.post("")
@require_auth
@require_permission("catalogs:create")
def create_catalog_route():
    """
    Create a catalog.

    Request body:
    {
        "code": "CTN-001",        // required, unique, immutable, stored upper-case
        "name": "Premium Cotton", // required
        "material": "Cotton",     // required
        "description": "...",     // optional
        "status": "active",       // optional (active/archived/draft)
        "image": "..."            // optional
    }
    """
    data = request.get_json(silent=True)
    try:
        catalog = get_services().catalogs.create(data, g.current_user.id)
        return success_response(catalog.to_dict(), 201)
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create catalog")
        return error_response(InternalError())


@catalogs_bp.put("/<catalog_id>")
@require_auth
@require_permission("catalogs:update")
def update_catalog_route(catalog_id: str):
    data = request.get_json(silent=True)
    try:
        catalog = get_services().catalogs.update(catalog_id, data, g.current_user.id)
        return success_response(catalog.to_dict())
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update catalog")
        return error_response(InternalError())


@catalogs_bp.delete("/<catalog_id>")
@require_auth
@require_permission("catalogs:delete")
def delete_catalog_route(catalog_id: str):
    try:
        get_services().catalogs.delete(catalog_id, g.current_user.id)
        return success_response(None)
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete catalog")
        return error_response(InternalError())
