"""
ArchLens Wall Estimator API v1.0
FastAPI backend for masonry wall quantity and cost estimation,
Groq LLaMA 3.1 70B primary LLM + Gemini 1.5 Flash fallback.
"""
import os
import logging
from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from app.services.logging_config import setup_logging
from app.services.middleware import RequestTimingMiddleware

# Load .env file automatically in dev (no-op if python-dotenv not installed or file missing)
try:
    from dotenv import load_dotenv
    load_dotenv()
except ImportError:
    pass
from fastapi.middleware.cors import CORSMiddleware

_log_level = os.getenv("LOG_LEVEL", "INFO")
_json_logs = os.getenv("LOG_FORMAT", "json").lower() != "text"
setup_logging(level=_log_level, json_output=_json_logs)
logger = logging.getLogger("archlens-api")

for var in ["GROQ_API_KEY", "GEMINI_API_KEY"]:
    if not os.getenv(var):
        logger.info(f"Optional env var not set: {var}")


app = FastAPI(
    title="ArchLens Wall Estimator API",
    version="1.0.0",
    description="Masonry wall material quantities, mortar and budget checks",
)


# ---------------------------------------------------------------------------
# Security Headers Middleware
# ---------------------------------------------------------------------------
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds standard security headers to every response."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


# ---------------------------------------------------------------------------
# CORS: restricted to allowed origins from env
# ---------------------------------------------------------------------------
_cors_default = "http://localhost:3000,http://localhost:8081"
cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", _cors_default).split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Requested-With", "X-Request-ID"],
)
app.add_middleware(SecurityHeadersMiddleware)
# Request timing + X-Request-ID must be outermost so it wraps all other middleware
app.add_middleware(RequestTimingMiddleware)

# Routers
from app.api.wall_routes import router as wall_router

app.include_router(wall_router)


@app.get("/health")
async def health_check():
    return {
        "status": "active",
        "version": "1.0.0",
        "llm_primary": os.getenv("LLM_PRIMARY_MODEL", "groq/llama-3.1-70b-versatile"),
        "llm_fallback": os.getenv("LLM_FALLBACK_MODEL", "gemini/gemini-1.5-flash"),
    }
