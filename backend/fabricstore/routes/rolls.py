# Overview: Flask API routes for roll operations; parses input and returns JSON responses.

"""
Roll Routes

SECURITY: All routes require authentication.
- Reads require rolls:read
- Create/update/delete require rolls:create / rolls:update / rolls:delete

Every response uses the {success, data} / {success: false, error} envelope.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_permission
from ..errors import AppError, InternalError
from ..responses import error_response, success_response
from ..services import get_services


rolls_bp = Blueprint("rolls", __name__, url_prefix="/api/rolls")


def _truthy(value: str | None) -> bool:
    return (value or "").lower() in ("1", "true", "yes")


@rolls_bp.get("")
@require_auth
@require_permission("rolls:read")
def list_rolls_route():
    """
    List rolls, newest first.

    Query parameters:
    - catalog, status, degree, color: exact matches
    - search: substring of barcode, color or location
    - minLength, maxLength: length bounds in meters
    - includeDeleted: include soft-deleted rolls (default: false)
    """
    filters = {
        "catalog": request.args.get("catalog") or request.args.get("catalogId"),
        "status": request.args.get("status"),
        "degree": request.args.get("degree"),
        "color": request.args.get("color"),
        "search": request.args.get("search"),
        "min_length": request.args.get("minLength", type=float),
        "max_length": request.args.get("maxLength", type=float),
        "include_deleted": _truthy(request.args.get("includeDeleted")),
    }
    try:
        rolls = get_services().rolls.get_all(filters)
        return success_response([r.to_dict() for r in rolls])
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list rolls")
        return error_response(InternalError())


@rolls_bp.get("/summary")
@require_auth
@require_permission("rolls:read")
def inventory_summary_route():
    try:
        return success_response(get_services().rolls.get_inventory_summary())
    except Exception:
        current_app.logger.exception("Failed to build inventory summary")
        return error_response(InternalError())


@rolls_bp.get("/colors")
@require_auth
@require_permission("rolls:read")
def list_colors_route():
    try:
        return success_response(get_services().rolls.get_colors())
    except Exception:
        current_app.logger.exception("Failed to list colors")
        return error_response(InternalError())


@rolls_bp.get("/barcode/<barcode>")
@require_auth
@require_permission("rolls:read")
def get_roll_by_barcode_route(barcode: str):
    """Active roll currently holding the barcode."""
    try:
        roll = get_services().rolls.get_by_barcode(barcode)
        return success_response(roll.to_dict())
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to look up barcode")
        return error_response(InternalError())


@rolls_bp.get("/<roll_id>")
@require_auth
@require_permission("rolls:read")
def get_roll_route(roll_id: str):
    try:
        roll = get_services().rolls.get_by_id(roll_id)
        return success_response(roll.to_dict())
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get roll")
        return error_response(InternalError())


@rolls_bp.post("")
@require_auth
@require_permission("rolls:create")
def create_roll_route():
    """
    Create a roll.

    Request body:
    {
        "barcode": "RC100",          // required, 3-50 chars [A-Za-z0-9-]
        "catalogId": "<uuid>",       // required, existing catalog
        "color": "Blue",             // required
        "degree": "A",               // required, A/B/C
        "lengthMeters": 50,          // required, 0 < x <= 10000
        "status": "in_stock",        // optional, default in_stock
        "location": "Shelf 3"        // optional
    }

    Returns 201 with the created roll; 409 if the barcode is held by an active roll.
    """
    data = request.get_json(silent=True)
    try:
        roll = get_services().rolls.create(data, g.current_user.id)
        return success_response(roll.to_dict(), 201)
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create roll")
        return error_response(InternalError())


@rolls_bp.put("/<roll_id>")
@require_auth
@require_permission("rolls:update")
def update_roll_route(roll_id: str):
    """Partial update. Status changes follow the roll lifecycle; sold rolls only accept location."""
    data = request.get_json(silent=True)
    try:
        roll = get_services().rolls.update(roll_id, data, g.current_user.id)
        return success_response(roll.to_dict())
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update roll")
        return error_response(InternalError())


@rolls_bp.delete("/<roll_id>")
@require_auth
@require_permission("rolls:delete")
def delete_roll_route(roll_id: str):
    try:
        get_services().rolls.delete(roll_id, g.current_user.id)
        return success_response(None)
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete roll")
        return error_response(InternalError())
