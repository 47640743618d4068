# Overview: Request and permission decorators for API routes.

from functools import wraps

from flask import g, request

from .errors import AppError, AuthError, PermissionDeniedError
from .permissions import has_all_permissions, has_any_permission, has_permission
from .responses import error_response
from .services import get_services


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def _is_authenticated() -> bool:
    return hasattr(g, "current_user")


def require_auth(f):
    """
    Require a valid bearer token.

    Sets:
    - g.current_user: the authenticated User
    - g.token: the plaintext bearer token (used by logout)

    Returns 401 (AUTH_REQUIRED / AUTH_INVALID / AUTH_EXPIRED) otherwise.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        try:
            user = get_services().auth.resolve_token(token)
        except AppError as e:
            return error_response(e)

        g.current_user = user
        g.token = token
        return f(*args, **kwargs)

    return decorated_function


def _check(predicate, required, message):
    if not _is_authenticated():
        return error_response(AuthError("Authentication required"))
    if not predicate(g.current_user.role, required):
        return error_response(PermissionDeniedError(message, required))
    return None


def require_permission(permission_code: str):
    """Require one permission from the static role table. Use after @require_auth."""
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            denied = _check(
                has_permission, permission_code, f"Permission denied: {permission_code} required"
            )
            if denied is not None:
                return denied
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_any_permission(*permission_codes):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            denied = _check(
                has_any_permission,
                list(permission_codes),
                f"Requires any of: {', '.join(permission_codes)}",
            )
            if denied is not None:
                return denied
            return f(*args, **kwargs)

        return decorated_function
    return decorator


def require_all_permissions(*permission_codes):
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            denied = _check(
                has_all_permissions,
                list(permission_codes),
                f"Requires all of: {', '.join(permission_codes)}",
            )
            if denied is not None:
                return denied
            return f(*args, **kwargs)

        return decorated_function
    return decorator
