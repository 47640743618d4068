# Overview: Flask API route for reading the audit trail (read-only).

from flask import Blueprint, current_app, request

from ..decorators import require_auth, require_permission
from ..errors import AppError, InternalError, ValidationError
from ..responses import error_response, success_response
from ..services import get_services
from ..services.audit_service import MAX_PER_PAGE
from ..time_utils import parse_iso_datetime


audit_bp = Blueprint("audit", __name__, url_prefix="/api/audit")


@audit_bp.get("")
@require_auth
@require_permission("audit:read")
def list_audit_route():
    """
    Paginated audit entries, newest first.

    Query parameters:
    - entityType, entityId, action, userId: exact matches
    - since, until: ISO-8601 bounds on the entry timestamp
    - page (default 1), perPage (default 50, max 200)

    Returns:
        {items: AuditLogEntry[], total, page, perPage}
    """
    page = max(request.args.get("page", 1, type=int), 1)
    per_page = min(max(request.args.get("perPage", 50, type=int), 1), MAX_PER_PAGE)

    try:
        try:
            since = parse_iso_datetime(request.args.get("since"))
            until = parse_iso_datetime(request.args.get("until"))
        except ValueError:
            raise ValidationError("since/until must be ISO-8601 datetimes")

        filters = {
            "entity_type": request.args.get("entityType"),
            "entity_id": request.args.get("entityId"),
            "action": request.args.get("action"),
            "user_id": request.args.get("userId"),
            "since": since,
            "until": until,
        }
        entries, total = get_services().audit.find(filters, page=page, per_page=per_page)
        return success_response({
            "items": [e.to_dict() for e in entries],
            "total": total,
            "page": page,
            "perPage": per_page,
        })
    except AppError as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list audit entries")
        return error_response(InternalError())
