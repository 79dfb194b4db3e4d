import functools
import json
import logging

from django.http import JsonResponse

from assignments.exceptions import AssignmentError, ValidationFailed

logger = logging.getLogger(__name__)


def jerr(msg, code=400, **extra):
    return JsonResponse({"ok": False, "message": msg, **extra}, status=code)


def jok(payload=None, code=200):
    base = {"ok": True}
    if payload:
        base.update(payload)
    return JsonResponse(base, status=code)


def json_body(request) -> dict:
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError):
        raise ValidationFailed(message="Request body must be valid JSON.") from None
    if not isinstance(data, dict):
        raise ValidationFailed(message="Request body must be a JSON object.")
    return data


def api_view(*methods):
    """Session-authenticated JSON endpoint; service errors become status codes."""
    allowed = {m.upper() for m in methods}

    def decorator(view):
        @functools.wraps(view)
        def wrapper(request, *args, **kwargs):
            if request.method not in allowed:
                resp = jerr("Method not allowed.", code=405)
                resp["Allow"] = ", ".join(sorted(allowed))
                return resp
            if not request.user.is_authenticated:
                return jerr("Authentication required.", code=401)
            try:
                return view(request, *args, **kwargs)
            except ValidationFailed as e:
                return jerr(e.message, code=e.status_code, errors=e.errors)
            except AssignmentError as e:
                if e.status_code >= 500:
                    logger.error("%s %s failed: %s", request.method, request.path, e.message)
                return jerr(e.message, code=e.status_code)
        return wrapper
    return decorator
