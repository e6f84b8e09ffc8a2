"""
PhotoShare Backend — Collection Route Handlers
================================================

What:  CRUD for user collections under /api/collections.

Reading a single collection accepts anonymous callers (public collections
only); every other route requires a token.
"""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from photoshare.database import get_db_session
from photoshare.schemas.collection import (
    CollectionCreate,
    CollectionCreated,
    CollectionDetail,
    CollectionList,
    CollectionPhotoAdd,
)
from photoshare.schemas.common import ErrorResponse, SuccessResponse
from photoshare.security import CurrentUser, get_current_user, get_optional_user
from photoshare.services import collection_service

router = APIRouter(prefix="/api/collections", tags=["Collections"])

_OWNER_ERRORS = {
    403: {"description": "Not your collection", "model": ErrorResponse},
    404: {"description": "Collection or photo not found", "model": ErrorResponse},
}


@router.get("", response_model=CollectionList, summary="Your collections")
async def list_collections(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CollectionList:
    return await collection_service.list_collections(db, user)


@router.post(
    "",
    status_code=201,
    response_model=CollectionCreated,
    responses={400: {"description": "Name is required", "model": ErrorResponse}},
    summary="Create a collection",
)
async def create_collection(
    body: CollectionCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> CollectionCreated:
    return await collection_service.create_collection(db, user, body)


@router.get(
    "/{collection_id}",
    response_model=CollectionDetail,
    responses={
        403: {"description": "Collection is private", "model": ErrorResponse},
        404: {"description": "Collection not found", "model": ErrorResponse},
    },
    summary="Collection with its photos",
)
async def get_collection(
    collection_id: uuid.UUID,
    viewer: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db_session),
) -> CollectionDetail:
    return await collection_service.get_collection(db, collection_id, viewer)


@router.post(
    "/{collection_id}/photos",
    response_model=SuccessResponse,
    responses=_OWNER_ERRORS,
    summary="Add a photo to a collection",
)
async def add_photo(
    collection_id: uuid.UUID,
    body: CollectionPhotoAdd,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await collection_service.add_photo(db, collection_id, body.photo_id, user)
    return SuccessResponse()


@router.delete(
    "/{collection_id}/photos/{photo_id}",
    response_model=SuccessResponse,
    responses=_OWNER_ERRORS,
    summary="Remove a photo from a collection",
)
async def remove_photo(
    collection_id: uuid.UUID,
    photo_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await collection_service.remove_photo(db, collection_id, photo_id, user)
    return SuccessResponse()


@router.delete(
    "/{collection_id}",
    response_model=SuccessResponse,
    responses={404: {"description": "Collection not found or not yours", "model": ErrorResponse}},
    summary="Delete a collection",
)
async def delete_collection(
    collection_id: uuid.UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await collection_service.delete_collection(db, collection_id, user)
    return SuccessResponse()
