from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from core.error_mapping import http_status, user_message
from models.image_edit import EditResult, ErrorResponse, ProcessImageRequest, ProcessImageResponse
from services.image_edit_service import ImageEditService

router = APIRouter(tags=["image-edit"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}

MESSAGE_EDITED = "Image edited successfully!"
MESSAGE_TEXT_ONLY = "No images were generated. The AI provided text feedback instead."
MESSAGE_EMPTY = "The AI returned no content."

def get_image_edit_service():
    return ImageEditService()

def method_not_allowed() -> JSONResponse:
    return JSONResponse(
        status_code=405,
        content=ErrorResponse(error="Method not allowed").model_dump(exclude_none=True),
    )

def to_response(result: EditResult) -> JSONResponse:
    """Render an EditResult as the endpoint's JSON contract"""
    if not result.succeeded:
        body = ErrorResponse(
            error=user_message(result.error_kind),
            errorKind=result.error_kind,
            details=result.error_detail,
        )
        return JSONResponse(
            status_code=http_status(result.error_kind),
            content=body.model_dump(mode="json", exclude_none=True),
        )

    images = [image.to_data_url() for image in result.images]
    if images:
        message = MESSAGE_EDITED
    elif result.text:
        message = MESSAGE_TEXT_ONLY
    else:
        message = MESSAGE_EMPTY

    body = ProcessImageResponse(
        images=images,
        editedImage=images[0] if images else None,
        text=result.text,
        message=message,
    )
    return JSONResponse(status_code=200, content=body.model_dump(exclude_none=True))

@router.post("/process-image")
async def process_image(edit_request: ProcessImageRequest):
    """Edit an image with Gemini and return the normalized images/text"""
    image_edit_service = get_image_edit_service()
    result = await image_edit_service.handle(edit_request)
    return to_response(result)

@router.options("/process-image")
async def process_image_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)

@router.api_route("/process-image", methods=["GET", "PUT", "PATCH", "DELETE"])
async def process_image_method_not_allowed():
    return method_not_allowed()
