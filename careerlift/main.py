from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from careerlift.config import get_settings
from careerlift.database import init_db
from careerlift.errors import AnalysisFailed, InvalidRequest, describe
from careerlift.middleware.correlation import CorrelationMiddleware
from careerlift.routes import analysis, courses, learning
from careerlift.services.gateway import get_gateway
from careerlift.utils.logger import logger
from careerlift.utils.metrics import get_snapshot

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting CareerLift AI backend...")
    if not settings.gemini_api_key and not settings.test_mode:
        logger.warning(
            "GEMINI_API_KEY is not set. /api/analyze and /api/upload-resume will fail until it is configured."
        )
    if not settings.vertex_api_key:
        logger.info("VERTEX_API_KEY is not set; course search uses Gemini discovery and the static catalog.")
    await init_db()
    logger.info(f"Backend ready at http://{settings.backend_host}:{settings.backend_port}")
    yield
    logger.info("CareerLift AI backend shutting down.")


app = FastAPI(title=settings.app_name, version=settings.app_version, lifespan=lifespan)
app.state.limiter = analysis.limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(InvalidRequest)
async def invalid_request_handler(request: Request, exc: InvalidRequest):
    return JSONResponse(status_code=400, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies are 400s, same as missing required fields
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body.", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(AnalysisFailed)
async def analysis_failed_handler(request: Request, exc: AnalysisFailed):
    return JSONResponse(status_code=500, content={"error": exc.message, "details": jsonable_encoder(describe(exc))})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)


allowed_origins = [origin.strip() for origin in settings.allowed_origins.split(",") if origin.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-User-ID", "X-Correlation-ID"],
)
app.add_middleware(CorrelationMiddleware)


@app.get("/health")
async def health_check():
    return {"status": "ok"}


@app.get("/")
async def root():
    return {"status": "ok", "message": "CareerLift AI backend is running."}


@app.get("/metrics")
async def metrics():
    snapshot = get_snapshot()
    snapshot["circuits"] = get_gateway().get_circuit_states()
    return snapshot


app.include_router(analysis.router, prefix="/api", tags=["Analysis"])
app.include_router(learning.router, prefix="/api", tags=["Learning Resources"])
app.include_router(courses.router, prefix="/api", tags=["Courses"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "careerlift.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.debug
    )
