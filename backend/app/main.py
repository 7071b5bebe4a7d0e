import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .config import LOG_LEVEL
from .models.common import RequestOptions
from .models.mealplan import DietaryPreferences, KNOWN_DIET_PATTERNS
from .models.nutrition import KNOWN_COUNTRIES
from .routers import mealplan, nutrition
from .services.errors import AIServiceError, UpstreamError

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

app = FastAPI(
    title="Fitness AI API",
    description="API for analyzing food photos and generating diet plans with a generative model.",
    version="0.1.0",
)

# Include the routers
app.include_router(nutrition.router)
app.include_router(mealplan.router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=CORS_HEADERS["Access-Control-Allow-Headers"].split(", "),
)


# Registered after CORSMiddleware so it is the outermost layer and answers every preflight itself
@app.middleware("http")
async def answer_preflight(request: Request, call_next):
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)
    return await call_next(request)


@app.exception_handler(AIServiceError)
async def ai_service_error_handler(request: Request, exc: AIServiceError):
    if isinstance(exc, UpstreamError):
        logger.error(f"{request.url.path} failed at stage '{exc.stage}': {exc.message} (remote status: {exc.status}, body: {exc.body})")
    elif exc.status_code >= 500:
        logger.error(f"{request.url.path} failed at stage '{exc.stage}': {exc.message}")
    else:
        logger.info(f"{request.url.path} rejected at stage '{exc.stage}': {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=CORS_HEADERS)


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"{request.url.path} rejected, unreadable body: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Request body must be a valid JSON object"}, headers=CORS_HEADERS)


@app.get("/", tags=["Root"])
async def read_root():
    return {"message": "Welcome to the Fitness AI API!"}


@app.get("/options", response_model=RequestOptions, tags=["Root"])
async def read_options():
    """Lists the country codes, diet patterns and restriction flags the UI offers."""
    return RequestOptions(
        countries=KNOWN_COUNTRIES,
        diet_patterns=KNOWN_DIET_PATTERNS,
        preferences=[field.alias or name for name, field in DietaryPreferences.model_fields.items()],
    )
