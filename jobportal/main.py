"""
Job Portal - Main Application

FastAPI backend with:
- MongoDB for users, jobs and applications
- S3 for resume files
- JWT authentication (tokens issued by the identity provider)

Run: uvicorn jobportal.main:app --reload
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import PyMongoError

from jobportal.api.routes import api_router
from jobportal.core.config import get_settings
from jobportal.core.errors import PortalError
from jobportal.core.logger import configure_logging, get_logger
from jobportal.db.mongodb import init_mongo_indexes, test_mongo_connection
from jobportal.services.application_service import get_application_manager

settings = get_settings()
configure_logging()
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Job Portal",
    description="""
    Job portal backend connecting job seekers and employers.

    ## Features
    - **Applications**: apply with an uploaded or stored resume, list, two-party delete
    - **Profiles**: profile update with resume replacement
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.exception_handler(PortalError)
async def portal_error_handler(request: Request, exc: PortalError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message},
    )


@app.exception_handler(PyMongoError)
async def database_error_handler(request: Request, exc: PyMongoError):
    logger.error(f"{request.method} {request.url.path} database error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Database error. Please try again later."},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} failed")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": "Internal Server Error."},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request.") if errors else "Invalid request."
    return JSONResponse(status_code=400, content={"success": False, "message": message})


# Startup event
@app.on_event("startup")
def startup_event():
    """Initialize MongoDB indexes and finish any interrupted hard deletes."""
    try:
        init_mongo_indexes()
        get_application_manager().purge_fully_deleted()
    except Exception as e:
        logger.error(f"MongoDB startup maintenance failed: {e}")


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
