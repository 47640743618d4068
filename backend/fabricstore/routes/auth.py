# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- POST /api/auth/login   {email, password} -> {user, token}
- POST /api/auth/logout  revokes the bearer token
- GET  /api/auth/me      current user plus resolved permissions

Self-registration does not exist: accounts are created by admins
(POST /api/users) or via `flask users create`.
"""

from flask import Blueprint, current_app, g, request

from ..decorators import require_auth
from ..errors import AppError, InternalError
from ..permissions import get_role_permissions
from ..responses import error_response, success_response
from ..services import get_services


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate and create a session token.

    The token must be sent as `Authorization: Bearer <token>` on protected routes.
    """
    data = request.get_json(silent=True) or {}
    try:
        user, token = get_services().auth.login(
            data.get("email"),
            data.get("password"),
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        return success_response({"user": user.to_dict(), "token": token})
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Login failed")
        return error_response(InternalError())


@auth_bp.post("/logout")
@require_auth
def logout_route():
    try:
        get_services().auth.logout(g.token)
        return success_response(None)
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Logout failed")
        return error_response(InternalError())


@auth_bp.get("/me")
@require_auth
def me_route():
    user = g.current_user
    payload = user.to_dict()
    payload["permissions"] = get_role_permissions(user.role)
    return success_response(payload)
