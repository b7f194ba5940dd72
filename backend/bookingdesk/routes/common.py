"""
BookingDesk Backend — Shared Route Helpers
============================================

What:  Dependency getters for the collaborators on `app.state` and the
       handler bodies that businesses and clients share (the image endpoints
       and the 501 endpoint).
How:   create_app() puts one Repository per resource, the ImageManager and
       the Settings on app.state. The getters below read them back so route
       modules never import module-level singletons.
"""

import base64
import logging
from typing import List, Optional

from fastapi import Request
from fastapi.responses import Response

from bookingdesk.config import Settings
from bookingdesk.exceptions import MethodNotImplementedError, ValidationError
from bookingdesk.middleware.request_id import request_id_var
from bookingdesk.schemas.common import ErrorResponse, ImageUploadResponse, StoredImage
from bookingdesk.services.image_manager import ImageManager
from bookingdesk.services.repository import Repository

logger = logging.getLogger(__name__)

# Every method a resource router does not dispatch (GET, POST and DELETE are)
UNSUPPORTED_METHODS = ["PUT", "PATCH", "HEAD", "OPTIONS", "TRACE"]

ERROR_RESPONSES = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing or rejected credential", "model": ErrorResponse},
    404: {"description": "Record not found", "model": ErrorResponse},
    500: {"description": "Store failure", "model": ErrorResponse},
}


def error_responses(*codes: int) -> dict:
    """OpenAPI `responses` entries for the given status codes."""
    return {code: ERROR_RESPONSES[code] for code in codes}


# ══════════════════════════════════════════════════════════════════════════
# Dependency Getters
# ══════════════════════════════════════════════════════════════════════════


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_business_repository(request: Request) -> Repository:
    return request.app.state.businesses


def get_client_repository(request: Request) -> Repository:
    return request.app.state.clients


def get_appointment_repository(request: Request) -> Repository:
    return request.app.state.appointments


def get_image_manager(request: Request) -> ImageManager:
    return request.app.state.image_manager


# ══════════════════════════════════════════════════════════════════════════
# Shared Handler Bodies
# ══════════════════════════════════════════════════════════════════════════


def _image_too_large(max_size: int, **context: int) -> ValidationError:
    max_mb = max_size / (1024 * 1024)
    return ValidationError(
        message=f"image exceeds maximum of {max_mb:.0f}MB",
        field="image",
        context={"max_size": max_size, **context},
    )


def validate_image_size(size: int, max_size: int) -> None:
    """
    Reject empty bodies and bodies over `max_size` bytes.

    Raises:
        ValidationError: "no image provided" or a size-limit message
    """
    if size == 0:
        raise ValidationError(message="no image provided", field="image")
    if size > max_size:
        raise _image_too_large(max_size, actual_size=size)


def _content_length(request: Request) -> Optional[int]:
    raw = request.headers.get("content-length")
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


async def read_image_body(request: Request, max_size: int) -> bytes:
    """
    Read the request body, stopping as soon as it passes `max_size` bytes.

    Raises:
        ValidationError: "no image provided" or a size-limit message
    """
    # Refuse oversized uploads before reading them into memory
    content_length = _content_length(request)
    if content_length and content_length > max_size:
        raise _image_too_large(max_size, reported_size=content_length)

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > max_size:
            raise _image_too_large(max_size, received_size=received)
        chunks.append(chunk)

    data = b"".join(chunks)
    validate_image_size(len(data), max_size)
    return data


async def upload_image(
    request: Request,
    record_id: str,
    repository: Repository,
    image_manager: ImageManager,
    max_size: int,
) -> ImageUploadResponse:
    """
    Store the raw request body as a new image of record `record_id`.

    Steps:
        1. Existence precheck (404 before the body is read)
        2. Read the raw body; reject empty or oversized bodies (400)
        3. Upload the blob under <record id>/<new key>
        4. Append <bucket>/<record id>/<key> to the record's images
    """
    await repository.get_by_id(record_id)
    data = await read_image_body(request, max_size)

    key = await image_manager.upload(
        record_id, data, content_type=request.headers.get("content-type")
    )
    url = image_manager.image_url(record_id, key)
    await repository.append_image(record_id, url)

    logger.info(
        "[%s] Image %s attached to %s %s", request_id_var.get(""), key, repository.resource, record_id
    )
    return ImageUploadResponse(image=url)


async def fetch_image(
    record_id: str,
    key: str,
    repository: Repository,
    image_manager: ImageManager,
) -> Response:
    """Return the stored bytes of one image of record `record_id`."""
    await repository.get_by_id(record_id)
    data = await image_manager.fetch(record_id, key)
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Cache-Control": "public, max-age=86400"},
    )


async def list_images(
    record_id: str,
    repository: Repository,
    image_manager: ImageManager,
) -> List[StoredImage]:
    """Every image of record `record_id`, base64-encoded, in upload order."""
    record = await repository.get_by_id(record_id)
    return [
        StoredImage(url=url, size=len(data), data=base64.b64encode(data).decode("ascii"))
        for url, data in await image_manager.fetch_all(record)
    ]


async def method_not_implemented(request: Request) -> None:
    raise MethodNotImplementedError(request.method)
