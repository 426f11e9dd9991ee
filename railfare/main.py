from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from railfare.core.config import settings
from railfare.core.errors import RailfareError
from railfare.core.logger import logger, log_error, log_warning
from railfare.api.client.routes_connections import router as connections_router

# Create FastAPI application
app = FastAPI(
    title=settings.APP_NAME,
    description="Train connections and prices between two stations, in CZK and EUR",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Configure CORS
# Note: When allow_credentials=True, allow_origins cannot be ["*"]
if settings.cors_origins_list == ["*"]:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )


# Global exception handlers
@app.exception_handler(RailfareError)
async def railfare_exception_handler(request: Request, exc: RailfareError):
    """Answer pipeline errors with {"error": message}"""
    endpoint = f"{request.method} {request.url.path}"
    if exc.status_code < 500:
        log_warning(endpoint, str(exc))
    else:
        log_error(endpoint, exc)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc)}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions with proper logging"""
    logger.warning(
        f"HTTP {exc.status_code}: {request.method} {request.url.path} - {exc.detail}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)}
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with user-friendly messages"""
    errors = exc.errors()
    logger.warning(f"Validation error: {request.method} {request.url.path} - {errors}")

    formatted_errors = []
    for error in errors:
        field = " -> ".join(str(x) for x in error["loc"])
        formatted_errors.append(f"{field}: {error['msg']}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "; ".join(formatted_errors)}
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all exception handler for unexpected errors"""
    log_error(f"{request.method} {request.url.path}", exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)}
    )


# Include routers
app.include_router(connections_router)


@app.on_event("startup")
async def startup_event():
    logger.info("=" * 60)
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info("=" * 60)
    logger.info(f"Debug mode: {settings.DEBUG}")
    logger.info(f"IPWS: {settings.IPWS_BASE_URL}")
    logger.info(f"Rates: {settings.RATES_URL} ({settings.SOURCE_CURRENCY})")
    logger.info(f"Server running at http://localhost:{settings.PORT}/connections")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


@app.get("/")
async def root():
    """API root endpoint"""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "online",
        "endpoints": {
            "connections": "/connections",
            "docs": "/docs"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


def run():
    import uvicorn
    uvicorn.run(
        "railfare.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )


if __name__ == "__main__":
    run()
