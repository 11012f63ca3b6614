import hmac
from typing import Optional

from fastapi import Header, Request

from tableside.core.errors import AuthorizationError


def token_is_valid(expected: Optional[str], supplied: Optional[str]) -> bool:
    """No configured token means admin auth is switched off."""
    if not expected:
        return True
    return bool(supplied) and hmac.compare_digest(expected, supplied)


def require_admin(request: Request, authorization: Optional[str] = Header(None)):
    expected = request.app.state.settings.ADMIN_API_TOKEN
    supplied = None
    if authorization and authorization.startswith("Bearer "):
        supplied = authorization.split("Bearer ", 1)[1].strip()
    if not token_is_valid(expected, supplied):
        raise AuthorizationError("Unauthorized: Admin access required")


def get_cart_service(request: Request):
    return request.app.state.cart_service


def get_checkout_service(request: Request):
    return request.app.state.checkout_service


def get_admin_console(request: Request):
    return request.app.state.admin_console


def get_notification_service(request: Request):
    return request.app.state.notification_service


def get_menu_service(request: Request):
    return request.app.state.menu_service
