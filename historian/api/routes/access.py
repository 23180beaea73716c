"""
Access page endpoints.

POST /access checks the submitted key against the shared secret and, on
success, writes the access cookie the route gate looks for.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from historian.auth import AccessGate
from historian.config import ACCESS_COOKIE_MAX_AGE, ACCESS_COOKIE_NAME, ACCESS_PAGE_PATH
from historian.infrastructure import settings
from historian.services import get_local_storage
from historian.storage import LocalStorage

router = APIRouter(prefix=ACCESS_PAGE_PATH, tags=["access"])


class AccessRequest(BaseModel):
    access_key: str


class AccessStatusResponse(BaseModel):
    authenticated: bool


def _gate(request: Request, storage: LocalStorage) -> AccessGate:
    return AccessGate(storage=storage, marker=dict(request.cookies))


def _request_is_authenticated(gate: AccessGate) -> bool:
    """
    Only the cookie sent with this request counts over HTTP.

    The durable store is shared by every caller, so it is repaired from a
    valid cookie but never used to vouch for a request that lacks one.
    """
    if not gate.has_valid_marker():
        return False
    return gate.is_authenticated()


def _sync_cookie(response: Response, gate: AccessGate) -> None:
    """Copy the gate's marker jar back onto the response cookies."""
    token = gate.marker.get(ACCESS_COOKIE_NAME)
    if token:
        response.set_cookie(
            ACCESS_COOKIE_NAME,
            token,
            max_age=ACCESS_COOKIE_MAX_AGE,
            path="/",
            httponly=True,
            samesite="lax",
            secure=settings.HISTORIAN_ENV == "production",
        )
    else:
        response.delete_cookie(ACCESS_COOKIE_NAME, path="/")


@router.get("", response_model=AccessStatusResponse)
async def access_page(
    request: Request,
    storage: LocalStorage = Depends(get_local_storage),
) -> AccessStatusResponse:
    """Landing point for redirects from the route gate."""
    return AccessStatusResponse(authenticated=_request_is_authenticated(_gate(request, storage)))


@router.post("", response_model=AccessStatusResponse)
async def submit_access_key(
    body: AccessRequest,
    request: Request,
    storage: LocalStorage = Depends(get_local_storage),
) -> Response:
    """
    Submit the access key.

    Returns 401 and leaves cookies untouched when the key is wrong.
    """
    gate = _gate(request, storage)
    if not gate.authenticate(body.access_key):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Invalid access key", "authenticated": False},
        )

    response = JSONResponse(content={"authenticated": True})
    _sync_cookie(response, gate)
    return response


@router.get("/status", response_model=AccessStatusResponse)
async def access_status(
    request: Request,
    storage: LocalStorage = Depends(get_local_storage),
) -> AccessStatusResponse:
    """Report whether this request carries a valid access cookie."""
    return AccessStatusResponse(authenticated=_request_is_authenticated(_gate(request, storage)))


@router.post("/logout", response_model=AccessStatusResponse)
async def logout(
    request: Request,
    storage: LocalStorage = Depends(get_local_storage),
) -> Response:
    gate = _gate(request, storage)
    gate.logout()
    response = JSONResponse(content={"authenticated": False})
    _sync_cookie(response, gate)
    return response
