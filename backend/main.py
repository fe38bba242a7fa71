from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
import logging

load_dotenv()

from api import health, image_edit
from config.settings import settings
from core.logging_config import setup_logging
from models.image_edit import ErrorResponse

setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME, version=settings.VERSION)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=False,  # "*" is only sent back verbatim without credentials
    allow_methods=settings.CORS_ALLOW_METHODS,
    allow_headers=["*"],
)

# Include API routers
app.include_router(image_edit.router, prefix=settings.API_V1_STR)
app.include_router(health.router, prefix=settings.API_V1_STR)

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.warning("Malformed request body on %s: %s", request.url.path, exc.errors())
    body = ErrorResponse(error="Invalid request body. Expected a JSON object.")
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    body = ErrorResponse(error="Internal server error")
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))

@app.get("/")
async def root():
    return {"message": f"{settings.PROJECT_NAME} API is running"}

if __name__ == "__main__":
    import uvicorn
    logger.info("Serving %s on http://%s:%s (model %s)", settings.PROJECT_NAME, settings.HOST, settings.PORT, settings.GEMINI_MODEL)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
