"""
Conversion endpoints - render an uploaded .eml message to a JPEG image.

Two entry points share the same pipeline:
- POST /convert         multipart upload, file field ``eml_file``
- POST /convert/base64  JSON body ``{"eml_base64": "..."}``
"""

import base64
import binascii
from typing import Dict, Optional

import structlog
from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import Response

from ...config import settings
from ...errors import InvalidPayload, MissingFile, PayloadTooLarge, SessionUnavailable
from ...models.api_models import ConvertBase64Request, ErrorResponse
from ...models.render import ConversionResult
from ...pipeline import EmailRenderPipeline

logger = structlog.get_logger(__name__)
router = APIRouter()

READ_CHUNK_SIZE = 64 * 1024

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input or email"},
    413: {"model": ErrorResponse, "description": "Upload exceeds the size limit"},
    500: {"model": ErrorResponse, "description": "Rendering failed"},
    503: {"model": ErrorResponse, "description": "Renderer unavailable or saturated"},
    504: {"model": ErrorResponse, "description": "Document load timed out"},
}


def get_pipeline(request: Request) -> EmailRenderPipeline:
    """
    Build the pipeline around the shared browser session on app.state.
    """
    session = getattr(request.app.state, "browser_session", None)
    if session is None:
        raise SessionUnavailable("Browser session is not started")
    return EmailRenderPipeline(
        pages=session,
        config=request.app.state.render_config,
    )


def _size_limit_error(limit_bytes: int) -> PayloadTooLarge:
    return PayloadTooLarge(
        f"Email exceeds maximum upload size ({limit_bytes // (1024 * 1024)}MB)"
    )


async def read_upload(file: UploadFile, limit_bytes: int) -> bytes:
    """
    Read an upload in chunks, stopping as soon as it passes the size limit.

    Raises:
        PayloadTooLarge: If the upload is larger than limit_bytes
    """
    if file.size is not None and file.size > limit_bytes:
        raise _size_limit_error(limit_bytes)

    chunks = []
    total = 0
    while True:
        chunk = await file.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit_bytes:
            raise _size_limit_error(limit_bytes)
        chunks.append(chunk)
    return b"".join(chunks)


def decode_base64_payload(payload: str, limit_bytes: int) -> bytes:
    """
    Decode a base64 encoded message.

    Raises:
        InvalidPayload: If the payload is empty or not valid base64
        PayloadTooLarge: If the decoded message is larger than limit_bytes
    """
    compact = "".join(payload.split())
    if not compact:
        raise InvalidPayload("eml_base64 is empty")

    # 4 base64 characters encode 3 bytes
    if len(compact) // 4 * 3 > limit_bytes + 3:
        raise _size_limit_error(limit_bytes)

    try:
        eml_bytes = base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidPayload(f"eml_base64 is not valid base64: {e}") from e

    if len(eml_bytes) > limit_bytes:
        raise _size_limit_error(limit_bytes)
    return eml_bytes


def build_image_response(result: ConversionResult) -> Response:
    """JPEG response with the sanitized metadata in X-* headers."""
    capture = result.capture
    headers: Dict[str, str] = {
        "X-Email-Subject": result.metadata.subject,
        "X-Email-From": result.metadata.sender,
        "X-Message-ID": result.metadata.message_id,
        "X-Height-Truncated": "true" if capture.height_truncated else "false",
    }
    if capture.height_truncated:
        headers["X-Actual-Height"] = str(capture.actual_height)
        headers["X-Captured-Height"] = str(capture.captured_height)

    return Response(content=capture.image_bytes, media_type="image/jpeg", headers=headers)


@router.post(
    "/convert",
    response_class=Response,
    responses={200: {"content": {"image/jpeg": {}}}, **ERROR_RESPONSES},
)
async def convert_eml_file(
    eml_file: Optional[UploadFile] = File(None, description=".eml file to render"),
    pipeline: EmailRenderPipeline = Depends(get_pipeline),
) -> Response:
    """
    Render an uploaded .eml file to a JPEG image.

    The spooled upload is closed (and its temporary storage released) whatever
    the outcome.

    Returns:
        image/jpeg response with X-Email-* metadata headers
    """
    if eml_file is None:
        raise MissingFile("No file uploaded. Send the message in the 'eml_file' field.")

    try:
        eml_bytes = await read_upload(eml_file, settings.max_upload_size_bytes)
        logger.info(
            "Conversion requested",
            entry_point="multipart",
            filename=eml_file.filename,
            size_bytes=len(eml_bytes),
        )
        result = await pipeline.convert(eml_bytes)
    finally:
        await eml_file.close()

    return build_image_response(result)


@router.post(
    "/convert/base64",
    response_class=Response,
    responses={200: {"content": {"image/jpeg": {}}}, **ERROR_RESPONSES},
)
async def convert_eml_base64(
    body: ConvertBase64Request,
    pipeline: EmailRenderPipeline = Depends(get_pipeline),
) -> Response:
    """
    Render a base64 encoded .eml message to a JPEG image.

    A payload that is not valid base64 is rejected with ``invalid_payload``
    before any rendering resource is touched.

    Returns:
        image/jpeg response with X-Email-* metadata headers
    """
    eml_bytes = decode_base64_payload(body.eml_base64, settings.max_upload_size_bytes)
    logger.info("Conversion requested", entry_point="base64", size_bytes=len(eml_bytes))

    result = await pipeline.convert(eml_bytes)
    return build_image_response(result)
