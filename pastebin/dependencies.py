"""Dependency injection for route handlers.

Pattern:
    - PasteService is built once (lifespan or create_app) and stored in
      app.state.paste_service
    - Dependency functions read it back from request.app.state
    - The acting identity is read from the header set by the authenticating
      proxy and passed explicitly into every service call
"""

from typing import Annotated, Optional

from fastapi import Depends, Request

from pastebin.config import settings
from pastebin.services.paste_service import PasteService

# Google IAP prefixes the address with the identity provider
_IDENTITY_PREFIXES = ("accounts.google.com:",)


def get_paste_service(request: Request) -> PasteService:
    """PasteService from app.state.

    Raises:
        RuntimeError: If the service was not initialized at startup
    """
    service = getattr(request.app.state, "paste_service", None)
    if service is None:
        raise RuntimeError("PasteService not initialized. Check lifespan setup.")
    return service


def get_acting_identity(request: Request) -> Optional[str]:
    """Email of the authenticated user, or None when the header is absent.

    Only trustworthy behind a proxy that strips this header from client
    requests and sets it itself.
    """
    header_name = getattr(request.app.state, "identity_header", settings.identity_header)
    raw = request.headers.get(header_name, "").strip()
    for prefix in _IDENTITY_PREFIXES:
        if raw.startswith(prefix):
            raw = raw[len(prefix):]
    return raw or None


ServiceDep = Annotated[PasteService, Depends(get_paste_service)]
IdentityDep = Annotated[Optional[str], Depends(get_acting_identity)]
