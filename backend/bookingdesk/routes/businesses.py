"""
BookingDesk Backend — Business Routes
=======================================

What:  The /businesses resource.
How:   Thin handlers: validate the input rules, call the business
       Repository / ImageManager, return the record.

Route Table:
    GET    /businesses/                      list (?category=)       public
    GET    /businesses/{id}                  get by id               public
    GET    /businesses/{id}/images           every image, base64     public
    GET    /businesses/{id}/images/{key}     image bytes             public
    POST   /businesses/                      create                  auth
    POST   /businesses/{id}/images           upload image (raw body) auth
    DELETE /businesses/{id}                  delete                  auth
    POST   anything else                     create                  auth
    any other method                         501
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from bookingdesk.config import Settings
from bookingdesk.exceptions import ValidationError
from bookingdesk.models.category import Category
from bookingdesk.routes.common import (
    UNSUPPORTED_METHODS,
    error_responses,
    fetch_image,
    get_business_repository,
    get_image_manager,
    get_settings,
    list_images,
    method_not_implemented,
    upload_image,
)
from bookingdesk.schemas.business import Business, BusinessCreate, BusinessFilter
from bookingdesk.schemas.common import ImageUploadResponse, MessageResponse, StoredImage
from bookingdesk.security import Principal, require_principal
from bookingdesk.services.image_manager import ImageManager
from bookingdesk.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/businesses", tags=["Businesses"])


def check_category(category: str) -> None:
    """Reject a tag outside the enumerated categories."""
    if not Category.is_valid(category):
        raise ValidationError(
            message="invalid category",
            field="category",
            context={"value": category, "allowed": Category.values()},
        )


@router.get(
    "/",
    response_model=List[Business],
    responses=error_responses(400, 500),
    summary="List businesses",
)
async def list_businesses(
    category: str = Query(default="", description="Only businesses filed under this category"),
    repository: Repository = Depends(get_business_repository),
) -> List[Business]:
    """
    List every business, optionally filtered by category.

    The filter is applied before the category is checked, so an unknown
    category costs one (empty) query and then answers 400.
    """
    businesses = await repository.list(BusinessFilter(category=category or None))

    if category:
        check_category(category)

    return businesses


@router.get(
    "/{business_id}",
    response_model=Business,
    responses=error_responses(404, 500),
    summary="Get a business by id",
)
async def get_business(
    business_id: str,
    repository: Repository = Depends(get_business_repository),
) -> Business:
    return await repository.get_by_id(business_id)


@router.post(
    "/",
    response_model=Business,
    responses=error_responses(400, 401, 500),
    summary="Register a business",
)
async def create_business(
    body: BusinessCreate,
    principal: Principal = Depends(require_principal),
    repository: Repository = Depends(get_business_repository),
) -> Business:
    """
    Register a business owned by the caller.

    Rules (checked in order):
        name must not be blank       → 400 "name cannot be empty"
        category must be enumerated  → 400 "invalid category"
    """
    if not body.name.strip():
        raise ValidationError(message="name cannot be empty", field="name")
    check_category(body.category)

    return await repository.create(
        {
            "name": body.name,
            "category": body.category,
            "images": [],
            "userId": principal.id,
        }
    )


@router.post(
    "/{business_id}/images",
    response_model=ImageUploadResponse,
    responses=error_responses(400, 401, 404, 500),
    summary="Attach an image to a business",
    description="The request body is the raw image. It is stored and its URL appended to `images`.",
)
async def upload_business_image(
    business_id: str,
    request: Request,
    principal: Principal = Depends(require_principal),
    repository: Repository = Depends(get_business_repository),
    image_manager: ImageManager = Depends(get_image_manager),
    settings: Settings = Depends(get_settings),
) -> ImageUploadResponse:
    return await upload_image(
        request, business_id, repository, image_manager, settings.max_file_size
    )


@router.get(
    "/{business_id}/images",
    response_model=List[StoredImage],
    responses=error_responses(404, 500),
    summary="List the images of a business",
)
async def list_business_images(
    business_id: str,
    repository: Repository = Depends(get_business_repository),
    image_manager: ImageManager = Depends(get_image_manager),
) -> List[StoredImage]:
    return await list_images(business_id, repository, image_manager)


@router.get(
    "/{business_id}/images/{key}",
    responses={200: {"description": "Image bytes"}, **error_responses(404, 500)},
    summary="Download a business image",
)
async def get_business_image(
    business_id: str,
    key: str,
    repository: Repository = Depends(get_business_repository),
    image_manager: ImageManager = Depends(get_image_manager),
) -> Response:
    return await fetch_image(business_id, key, repository, image_manager)


@router.delete(
    "/{business_id}",
    response_model=MessageResponse,
    responses=error_responses(401, 500),
    summary="Delete a business",
)
async def delete_business(
    business_id: str,
    principal: Principal = Depends(require_principal),
    repository: Repository = Depends(get_business_repository),
) -> MessageResponse:
    await repository.delete(business_id)
    logger.info("Business %s deleted by %s", business_id, principal.id)
    return MessageResponse(message="successful deletion")


# POST anywhere else under the mount creates, as POST / does
router.add_api_route(
    "/{rest:path}",
    create_business,
    methods=["POST"],
    response_model=Business,
    responses=error_responses(400, 401, 500),
    include_in_schema=False,
)

router.add_api_route(
    "/{rest:path}",
    method_not_implemented,
    methods=UNSUPPORTED_METHODS,
    include_in_schema=False,
)
