"""
FastAPI dependencies shared by the routers.

- get_services: the Services bundle built by create_app
- get_current_user: bearer token → Identity (401 / 403 before the handler runs)
- require_admin: get_current_user + admin role check
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from restaurant_api.models import UserRole
from restaurant_api.services import Identity, Services, require_role

logger = logging.getLogger(__name__)

# auto_error=False so a missing header reaches verify_token and gets our envelope
bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    """Services bundle attached to the application at startup."""
    return request.app.state.services


async def get_current_user(
    services: Annotated[Services, Depends(get_services)],
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)] = None,
) -> Identity:
    """
    Validate the bearer token and return the caller.

    Raises:
        Unauthorized: no token or malformed token
        Forbidden: bad signature or expired token
    """
    token = credentials.credentials if credentials else None
    return services.auth.verify_token(token)


async def require_admin(
    user: Annotated[Identity, Depends(get_current_user)],
) -> Identity:
    """Caller must hold the admin role."""
    require_role(user, UserRole.ADMIN)
    return user


CurrentUser = Annotated[Identity, Depends(get_current_user)]
AdminUser = Annotated[Identity, Depends(require_admin)]
ServicesDep = Annotated[Services, Depends(get_services)]
