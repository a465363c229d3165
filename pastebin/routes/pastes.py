"""
Pastebin Backend - Paste Route Handlers
========================================

What:  The HTTP surface of the pastebin.
How:   Each handler extracts form fields / path params and the acting
       identity, calls PasteService, and renders a template (or JSON when
       the client asks for application/json). Errors are raised as
       PastebinError subclasses and formatted by the global handlers.

Routes:
    GET    /                 index / submission form
    POST   /update/          create a paste            → 302 /{id}
    DELETE /update/{id}      delete an owned paste     → 204
    GET    /archive/         every paste, newest first
    GET    /{id}             one paste (read-through cache)

    "/{paste_id}" matches any single path segment, so it is declared last.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Form, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from pastebin.dependencies import IdentityDep, ServiceDep
from pastebin.exceptions import ValidationError
from pastebin.schemas.paste import ArchiveResponse, ErrorResponse, PasteCreate
from pastebin.services.paste_service import PasteService

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(tags=["Pastes"])


def _wants_json(request: Request) -> bool:
    accept = request.headers.get("accept", "")
    return "application/json" in accept and "text/html" not in accept


@router.get(
    "/",
    response_class=HTMLResponse,
    summary="Index page with the paste submission form",
)
async def index(request: Request, identity: IdentityDep) -> HTMLResponse:
    return templates.TemplateResponse(request, "index.html", {"identity": identity})


@router.post(
    "/update/",
    status_code=302,
    responses={
        302: {"description": "Paste created; Location points at it"},
        400: {"description": "Missing or oversized contents", "model": ErrorResponse},
        403: {"description": "Login required", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Create a paste",
)
async def create_paste(
    service: ServiceDep,
    identity: IdentityDep,
    title: Optional[str] = Form(default=None),
    contents: Optional[str] = Form(default=None),
    language: Optional[str] = Form(default=None),
) -> RedirectResponse:
    """
    Create a paste from the submission form and redirect to it.

    Form fields:
        title:    optional label
        contents: paste body (required)
        language: optional hint, stored as-is
    """
    paste_id = await service.create(
        PasteCreate(title=title or "", content=contents or "", language=language or ""),
        identity,
    )
    return RedirectResponse(url=f"/{paste_id}", status_code=302)


@router.delete(
    "/update/",
    status_code=204,
    responses={
        400: {"description": "No paste id in the URL", "model": ErrorResponse},
        403: {"description": "Login required", "model": ErrorResponse},
    },
    summary="Delete without an id (always rejected)",
)
async def delete_without_id(identity: IdentityDep) -> Response:
    # Login is checked before the URL, as for every /update/ request
    PasteService.require_identity(identity)
    raise ValidationError(message="No paste id found, bad URL", field="id")


@router.delete(
    "/update/{paste_id}",
    status_code=204,
    responses={
        204: {"description": "Paste deleted"},
        403: {"description": "Login required, or not the paste owner", "model": ErrorResponse},
        404: {"description": "Paste not found", "model": ErrorResponse},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="Delete an owned paste",
)
async def delete_paste(paste_id: str, service: ServiceDep, identity: IdentityDep) -> Response:
    await service.delete(paste_id, identity)
    return Response(status_code=204)


@router.get(
    "/archive/",
    response_class=HTMLResponse,
    responses={
        200: {"description": "All pastes, newest first"},
        500: {"description": "Store failure", "model": ErrorResponse},
    },
    summary="List every paste",
)
async def archive(request: Request, service: ServiceDep) -> Response:
    pastes = await service.list_recent()
    if _wants_json(request):
        return JSONResponse(content=ArchiveResponse(pastes=pastes).model_dump(mode="json"))
    return templates.TemplateResponse(request, "archive.html", {"pastes": pastes})


@router.get(
    "/{paste_id}",
    response_class=HTMLResponse,
    responses={
        200: {"description": "The paste"},
        404: {"description": "Paste not found", "model": ErrorResponse},
    },
    summary="Show a paste",
)
async def show_paste(
    paste_id: str, request: Request, service: ServiceDep, identity: IdentityDep
) -> Response:
    paste = await service.get(paste_id)
    if _wants_json(request):
        return JSONResponse(content=paste.model_dump(mode="json"))
    return templates.TemplateResponse(
        request,
        "paste.html",
        {"paste": paste, "is_owner": identity is not None and identity == paste.email},
    )
