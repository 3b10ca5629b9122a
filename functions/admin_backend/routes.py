"""
HTTP routes for the admin backend API.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from admin_backend.auth import check_credentials, issue_token, require_admin
from admin_backend.config import Settings, get_settings
from admin_backend.dependencies import get_collections
from admin_backend.resources import Collections, ResourceCollection
from admin_backend.schemas import (
    CreatedResponse,
    LoginRequest,
    MessageResponse,
    QuestionImageVariant,
    SignUrlResponse,
    TokenResponse,
)

logger = logging.getLogger(__name__)

public_router = APIRouter()
router = APIRouter(dependencies=[Depends(require_admin)])


@public_router.get("/", response_class=PlainTextResponse)
def root():
    return "RTMCS Server"


@public_router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, settings: Settings = Depends(get_settings)):
    if not check_credentials(payload.username, payload.password, settings):
        logger.info("Rejected login for %r", payload.username)
        raise HTTPException(status_code=401, detail="Unauthorized")
    return TokenResponse(token=issue_token(settings))


@router.get("/checkToken", response_model=MessageResponse)
def check_token():
    return MessageResponse()


@router.get("/refreshToken", response_model=TokenResponse)
def refresh_token(settings: Settings = Depends(get_settings)):
    return TokenResponse(token=issue_token(settings))


def _register_collection(prefix: str, pick, *, with_get: bool) -> None:
    """
    Attach list/create/replace/delete (and optionally get-by-id) routes for
    one collection under /{prefix}.
    """

    def collection(collections: Collections = Depends(get_collections)) -> ResourceCollection:
        return pick(collections)

    @router.get(f"/{prefix}", name=f"list_{prefix}")
    async def list_records(col: ResourceCollection = Depends(collection)):
        return await col.list()

    @router.post(f"/{prefix}", response_model=CreatedResponse, name=f"create_{prefix}")
    async def create_record(
        payload: dict[str, Any] = Body(...),
        col: ResourceCollection = Depends(collection),
    ):
        return CreatedResponse(id=await col.create(payload))

    if with_get:

        @router.get(f"/{prefix}/{{entity_id}}", name=f"get_{prefix}")
        async def get_record(entity_id: str, col: ResourceCollection = Depends(collection)):
            return await col.get(entity_id)

    @router.post(
        f"/{prefix}/{{entity_id}}", response_model=MessageResponse, name=f"replace_{prefix}"
    )
    async def replace_record(
        entity_id: str,
        payload: dict[str, Any] = Body(...),
        col: ResourceCollection = Depends(collection),
    ):
        await col.replace(entity_id, payload)
        return MessageResponse()

    @router.delete(
        f"/{prefix}/{{entity_id}}", response_model=MessageResponse, name=f"delete_{prefix}"
    )
    async def delete_record(entity_id: str, col: ResourceCollection = Depends(collection)):
        await col.delete(entity_id)
        return MessageResponse()


_register_collection("people", lambda c: c.people, with_get=False)
_register_collection("question", lambda c: c.questions, with_get=True)
_register_collection("shop", lambda c: c.items, with_get=True)


@router.get(
    "/question/{entity_id}/imageUploadURL/{variant}", response_model=SignUrlResponse
)
def question_image_upload_url(
    entity_id: str,
    variant: QuestionImageVariant,
    collections: Collections = Depends(get_collections),
    settings: Settings = Depends(get_settings),
):
    url = collections.questions.image_upload_url(
        entity_id, variant, expires_in=settings.upload_url_expires_seconds
    )
    return SignUrlResponse(url=url)


@router.get("/shop/{entity_id}/imageUploadURL/{variant}", response_model=SignUrlResponse)
def shop_image_upload_url(
    entity_id: str,
    variant: str,
    collections: Collections = Depends(get_collections),
    settings: Settings = Depends(get_settings),
):
    # Shop items have a single image; the variant segment is accepted for URL
    # compatibility with the question route and not used.
    url = collections.items.image_upload_url(
        entity_id, expires_in=settings.upload_url_expires_seconds
    )
    return SignUrlResponse(url=url)
