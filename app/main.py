# app/main.py
from __future__ import annotations

from fastapi import APIRouter, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

# --- Logging & request-id ---
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response as StarletteResponse

from app.config import get_settings
from app.core.logging import configure_logging, logger
from app.core.request_id import REQUEST_ID_HEADER, request_id_scope

from api.routers.article_content import router as article_content_router
from api.routers.health import router as health_router
from api.routers.news import router as news_router
from api.routers.og_image import router as og_image_router

settings = get_settings()

# Configureer logging voor de API
configure_logging(service_name="news-api", level=settings.LOG_LEVEL)

app = FastAPI(
    title="Crypto News Hub - API",
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
)

METHOD_NOT_ALLOWED = "Method not allowed"


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        with request_id_scope(request.headers.get(REQUEST_ID_HEADER)) as req_id:
            logger.info("request_started", method=request.method, path=str(request.url.path))
            try:
                response: StarletteResponse = await call_next(request)
            except Exception as exc:
                logger.error("request_exception", error=str(exc.__class__.__name__))
                raise
            logger.info("request_ended", status_code=response.status_code)
            response.headers[REQUEST_ID_HEADER] = req_id
            return response


# --- CORS ---
# Eerst toegevoegd = buitenste middleware, zodat ook foutresponses CORS-headers krijgen.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.add_middleware(RequestIdMiddleware)


def _error_body(path: str, message: str) -> dict:
    """Health and og-image keep their own envelope shapes."""
    if path.rstrip("/") == "/api/health":
        return {"ok": False, "error": message}
    if path.rstrip("/") == "/api/og-image":
        return {"error": message}
    return {"success": False, "error": message}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = METHOD_NOT_ALLOWED if exc.status_code == 405 else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request.url.path, message),
        headers=dict(exc.headers or {}),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", exc_info=True)
    return JSONResponse(status_code=500, content=_error_body(request.url.path, "Internal Server Error"))


# --- Liveness ---
@app.get("/")
async def root():
    return {"ok": True, "app": "Crypto News Hub API", "message": "Up & running"}


# --- Universele preflight ---
@app.options("/{rest_of_path:path}")
async def any_preflight(rest_of_path: str) -> Response:
    return Response(status_code=200)


api_router = APIRouter(prefix="/api")
api_router.include_router(news_router)
api_router.include_router(article_content_router)
api_router.include_router(health_router)
api_router.include_router(og_image_router)

app.include_router(api_router)

logger.info("routers_registered", routers=["news", "article_content", "health", "og_image"])
