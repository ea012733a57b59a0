from __future__ import annotations

import logging

from flask import jsonify

from ..core.exceptions import (
    AuthorizationError,
    ConfigurationMissingError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (ConfigurationMissingError, 400),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def error_response(e: Exception, *, action: str):
    """JSON error body with the HTTP status that matches the exception type."""
    for exc_type, status in _STATUS_BY_ERROR:
        if isinstance(e, exc_type):
            return jsonify({"success": False, "error": str(e)}), status

    logger.exception("Unexpected error while %s", action)
    return jsonify({"success": False, "error": f"Internal error while {action}"}), 500
