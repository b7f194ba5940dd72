"""
BookingDesk Backend — Client Routes
=====================================

Same surface as /businesses, without list filters:

    GET    /clients/                      list                    public
    GET    /clients/{id}                  get by id               public
    GET    /clients/{id}/images           every image, base64     public
    GET    /clients/{id}/images/{key}     image bytes             public
    POST   /clients/                      create                  auth
    POST   /clients/{id}/images           upload image (raw body) auth
    DELETE /clients/{id}                  delete                  auth
    POST   anything else                  create                  auth
    any other method                      501
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from bookingdesk.config import Settings
from bookingdesk.exceptions import ValidationError
from bookingdesk.routes.common import (
    UNSUPPORTED_METHODS,
    error_responses,
    fetch_image,
    get_client_repository,
    get_image_manager,
    get_settings,
    list_images,
    method_not_implemented,
    upload_image,
)
from bookingdesk.schemas.client import Client, ClientCreate, ClientFilter
from bookingdesk.schemas.common import ImageUploadResponse, MessageResponse, StoredImage
from bookingdesk.security import Principal, require_principal
from bookingdesk.services.image_manager import ImageManager
from bookingdesk.services.repository import Repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.get(
    "/",
    response_model=List[Client],
    responses=error_responses(500),
    summary="List clients",
)
async def list_clients(
    repository: Repository = Depends(get_client_repository),
) -> List[Client]:
    return await repository.list(ClientFilter())


@router.get(
    "/{client_id}",
    response_model=Client,
    responses=error_responses(404, 500),
    summary="Get a client by id",
)
async def get_client(
    client_id: str,
    repository: Repository = Depends(get_client_repository),
) -> Client:
    return await repository.get_by_id(client_id)


@router.post(
    "/",
    response_model=Client,
    responses=error_responses(400, 401, 500),
    summary="Register a client",
)
async def create_client(
    body: ClientCreate,
    principal: Principal = Depends(require_principal),
    repository: Repository = Depends(get_client_repository),
) -> Client:
    """Both names are required; either one blank → 400 "name cannot be empty"."""
    if not body.first_name.strip() or not body.last_name.strip():
        raise ValidationError(message="name cannot be empty", field="firstName/lastName")

    return await repository.create(
        {
            "firstName": body.first_name,
            "lastName": body.last_name,
            "images": [],
            "userId": principal.id,
        }
    )


@router.post(
    "/{client_id}/images",
    response_model=ImageUploadResponse,
    responses=error_responses(400, 401, 404, 500),
    summary="Attach an image to a client",
)
async def upload_client_image(
    client_id: str,
    request: Request,
    principal: Principal = Depends(require_principal),
    repository: Repository = Depends(get_client_repository),
    image_manager: ImageManager = Depends(get_image_manager),
    settings: Settings = Depends(get_settings),
) -> ImageUploadResponse:
    return await upload_image(
        request, client_id, repository, image_manager, settings.max_file_size
    )


@router.get(
    "/{client_id}/images",
    response_model=List[StoredImage],
    responses=error_responses(404, 500),
    summary="List the images of a client",
)
async def list_client_images(
    client_id: str,
    repository: Repository = Depends(get_client_repository),
    image_manager: ImageManager = Depends(get_image_manager),
) -> List[StoredImage]:
    return await list_images(client_id, repository, image_manager)


@router.get(
    "/{client_id}/images/{key}",
    responses={200: {"description": "Image bytes"}, **error_responses(404, 500)},
    summary="Download a client image",
)
async def get_client_image(
    client_id: str,
    key: str,
    repository: Repository = Depends(get_client_repository),
    image_manager: ImageManager = Depends(get_image_manager),
) -> Response:
    return await fetch_image(client_id, key, repository, image_manager)


@router.delete(
    "/{client_id}",
    response_model=MessageResponse,
    responses=error_responses(401, 500),
    summary="Delete a client",
)
async def delete_client(
    client_id: str,
    principal: Principal = Depends(require_principal),
    repository: Repository = Depends(get_client_repository),
) -> MessageResponse:
    await repository.delete(client_id)
    logger.info("Client %s deleted by %s", client_id, principal.id)
    return MessageResponse(message="successful deletion")


# POST anywhere else under the mount creates, as POST / does
router.add_api_route(
    "/{rest:path}",
    create_client,
    methods=["POST"],
    response_model=Client,
    responses=error_responses(400, 401, 500),
    include_in_schema=False,
)

router.add_api_route(
    "/{rest:path}",
    method_not_implemented,
    methods=UNSUPPORTED_METHODS,
    include_in_schema=False,
)
