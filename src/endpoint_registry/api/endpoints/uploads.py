"""Icon upload endpoint.

The file is sent as the raw request body with its MIME type in the
``Content-Type`` header.
"""

from fastapi import APIRouter, Depends, Header, Query, Request, status  # type: ignore[import-untyped]
from fastapi.concurrency import run_in_threadpool  # type: ignore[import-untyped]

from endpoint_registry.api.auth import get_caller
from endpoint_registry.api.dependencies import get_service
from endpoint_registry.api.models import UploadResponse
from endpoint_registry.core.authorization import Caller
from endpoint_registry.core.service import RegistryService

router = APIRouter()


@router.post("/icon", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_icon(
    request: Request,
    filename: str = Query("icon", max_length=255),
    content_type: str = Header("application/octet-stream"),
    caller: Caller = Depends(get_caller),
    service: RegistryService = Depends(get_service),
) -> UploadResponse:
    """Store an icon and return its public URL (signed-in users).

    Example:
        >>> POST /api/v1/uploads/icon?filename=logo.png
        Content-Type: image/png
        <bytes>
    """
    data = await request.body()
    mime_type = content_type.split(";")[0].strip().lower()
    url = await run_in_threadpool(service.upload_icon, caller, filename, mime_type, data)
    return UploadResponse(url=url)
