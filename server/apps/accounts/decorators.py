"""View decorators for authentication and role checks."""

import logging
from collections.abc import Callable
from functools import wraps
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse

logger = logging.getLogger(__name__)

_View = Callable[..., HttpResponse]


def _error(message: str, status: int) -> JsonResponse:
    return JsonResponse({'status': 'error', 'message': message}, status=status)


def login_required_json(view: _View) -> _View:
    """Reject anonymous callers with a JSON 401 response."""

    @wraps(view)
    def wrapper(
        request: HttpRequest,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponse:
        if not request.user.is_authenticated:
            return _error('Authentication required', 401)
        return view(request, *args, **kwargs)

    return wrapper


def require_roles(*roles: str) -> Callable[[_View], _View]:
    """Restrict a view to users holding one of the given roles.

    Args:
        roles: Allowed role values.

    Returns:
        Decorator returning 401 for anonymous and 403 for other roles.
    """

    def decorator(view: _View) -> _View:
        @wraps(view)
        def wrapper(
            request: HttpRequest,
            *args: Any,
            **kwargs: Any,
        ) -> HttpResponse:
            user = request.user
            if not user.is_authenticated:
                return _error('Authentication required', 401)
            if user.role not in roles:
                logger.warning(
                    'Role %s denied access to %s',
                    user.role,
                    request.path,
                )
                return _error(
                    'You do not have permission to perform this action',
                    403,
                )
            return view(request, *args, **kwargs)

        return wrapper

    return decorator
