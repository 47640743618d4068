# Overview: JSON envelope helpers used by every API route.

from __future__ import annotations

from typing import Any

from flask import jsonify

from .errors import AppError, normalize_error

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."


def success_response(data: Any, status: int = 200):
    return jsonify({"success": True, "data": data}), status


def error_payload(err: BaseException) -> dict:
    """
    Build the failure envelope body.

    Non-operational errors never leak their message or metadata; callers are
    expected to have logged the original exception already.
    """
    app_err: AppError = normalize_error(err)
    if not app_err.is_operational:
        return {
            "success": False,
            "error": {
                "message": GENERIC_ERROR_MESSAGE,
                "code": app_err.code,
                "statusCode": app_err.status_code,
            },
        }

    error = {
        "message": app_err.message,
        "code": app_err.code,
        "statusCode": app_err.status_code,
    }
    details = {k: v for k, v in app_err.metadata.items() if v is not None}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


def error_response(err: BaseException):
    app_err = normalize_error(err)
    return jsonify(error_payload(app_err)), app_err.status_code
