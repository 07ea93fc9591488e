# greenquote/main.py
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from greenquote import models  # noqa: F401  (registers SQLAlchemy models)
from greenquote.core.logging_config import logger, setup_logging
from greenquote.core.settings import settings
from greenquote.db import Base, engine
from greenquote.middleware import RequestIdMiddleware
from greenquote.routers import quotes, widget

# ----------------------------------------------------
# App init
# ----------------------------------------------------
app = FastAPI(title="GreenQuote", version="0.1.0")

setup_logging()
logger.info("startup", service="greenquote-api", env=settings.APP_ENV)


# ----------------------------------------------------
# Health
# ----------------------------------------------------
@app.get("/health", include_in_schema=True)
def health() -> dict:
    return {"status": "ok"}


# ----------------------------------------------------
# Logging middleware
# ----------------------------------------------------
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start = time.time()

    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID", "unknown"
    )
    client_ip = request.client.host if request.client else "unknown"

    bound_logger = logger.bind(
        request_id=request_id,
        ip=client_ip,
        endpoint=str(request.url.path),
        method=request.method,
    )

    bound_logger.info("request_started")
    response = await call_next(request)
    latency_ms = round((time.time() - start) * 1000, 2)

    bound_logger.bind(status_code=response.status_code, latency_ms=latency_ms).info(
        "request_finished"
    )
    return response


# ----------------------------------------------------
# Middleware
# ----------------------------------------------------
app.add_middleware(RequestIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------------------------------------
# Routers
# ----------------------------------------------------
app.include_router(widget.router)
app.include_router(quotes.router)


# ----------------------------------------------------
# Startup
# ----------------------------------------------------
@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
