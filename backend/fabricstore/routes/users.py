# Overview: Flask API routes for user administration; parses input and returns JSON responses.

"""
User Routes

SECURITY:
- Listing and reading require users:read
- Create/update/delete require users:create / users:update / users:delete
- Password change is allowed for the account owner or for users:update holders
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth, require_permission
from ..errors import AppError, InternalError, PermissionDeniedError
from ..permissions import has_permission
from ..responses import error_response, success_response
from ..services import get_services


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("users:read")
def list_users_route():
    filters = {
        "role": request.args.get("role"),
        "status": request.args.get("status"),
        "search": request.args.get("search"),
    }
    try:
        users = get_services().users.get_all(filters)
        return success_response([u.to_dict() for u in users])
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list users")
        return error_response(InternalError())


@users_bp.get("/<user_id>")
@require_auth
@require_permission("users:read")
def get_user_route(user_id: str):
    try:
        return success_response(get_services().users.get_by_id(user_id).to_dict())
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to get user")
        return error_response(InternalError())


@users_bp.post("")
@require_auth
@require_permission("users:create")
def create_user_route():
    """
    Create a user account.

    Request body:
    {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "password": "Secret123",   // 8-100 chars, upper + lower + digit
        "role": "storekeeper",     // admin / storekeeper / viewer
        "status": "active"         // optional
    }
    """
    data = request.get_json(silent=True)
    try:
        user = get_services().users.create(data, g.current_user.id)
        return success_response(user.to_dict(), 201)
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return error_response(InternalError())


@users_bp.put("/<user_id>")
@require_auth
@require_permission("users:update")
def update_user_route(user_id: str):
    data = request.get_json(silent=True)
    try:
        user = get_services().users.update(user_id, data, g.current_user.id)
        return success_response(user.to_dict())
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update user")
        return error_response(InternalError())


@users_bp.delete("/<user_id>")
@require_auth
@require_permission("users:delete")
def delete_user_route(user_id: str):
    try:
        get_services().users.delete(user_id, g.current_user.id)
        return success_response(None)
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete user")
        return error_response(InternalError())


@users_bp.post("/<user_id>/password")
@require_auth
def change_password_route(user_id: str):
    """
    Change a password.

    Request body: {"currentPassword": "...", "newPassword": "..."}
    """
    user = g.current_user
    if user.id != user_id and not has_permission(user.role, "users:update"):
        return error_response(
            PermissionDeniedError("Permission denied: users:update required", "users:update")
        )

    data = request.get_json(silent=True) or {}
    try:
        get_services().users.change_password(
            user_id,
            data.get("currentPassword"),
            data.get("newPassword"),
            actor_id=user.id,
        )
        return success_response(None)
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to change password")
        return error_response(InternalError())
