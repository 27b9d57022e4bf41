"""OAuth callback routes.

Hosts that serve HTTP mount this router so that the provider's redirect
reaches ``AuthenticationService.handle_callback``.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from authkit.auth.service import AuthenticationService, get_authentication_service
from authkit.core.constants import Routes
from authkit.core.exceptions import BadRequestError

logger = logging.getLogger(__name__)

AuthServiceDep = Annotated[
    AuthenticationService, Depends(get_authentication_service)
]

router = APIRouter(
    prefix=Routes.AUTH.prefix,
    tags=[Routes.AUTH.tag],
    responses={400: {"description": "No pending sign-in matched the callback"}},
)


@router.get("/callback/google")
async def google_callback(request: Request, service: AuthServiceDep):
    """Deliver Google's redirect to the pending sign-in."""
    if not service.handle_callback(str(request.url)):
        logger.info("Unmatched OAuth callback", extra={"path": request.url.path})
        raise BadRequestError("No pending sign-in matched this callback")
    return {"message": "Sign-in complete. You can close this window."}
