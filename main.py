import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from core.config import settings
from core.database import create_db_and_tables
from core.errors import Unexpected
from routes.auth import router as auth_router
from routes.features import router as features_router
from routes.mfa import router as mfa_router
from routes.project_members import router as project_members_router
from routes.projects import router as project_router
from routes.tickets import router as tickets_router
from routes.users import router as users_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

API_PREFIX = "/pmboard/api/v1"
REDACTED_FIELDS = {"password", "new_password", "newPassword"}


# =========================================
# 🏁 Lifespan (DB initialization)
# =========================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    logger.info("✅ Database tables created on startup.")
    yield
    logger.info("✅ Application shutting down.")


# =========================================
#  ✅ FastAPI App
# =========================================
app = FastAPI(lifespan=lifespan, title="PMBoard Backend", debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =========================================
# 📝 Request logging (non-production)
# =========================================
def redact(body: bytes) -> str:
    """Render a JSON body for the log with password fields masked."""
    if not body:
        return ""
    try:
        payload = json.loads(body)
    except ValueError:
        return "<non-json body>"
    if isinstance(payload, dict):
        payload = {k: ("***" if k in REDACTED_FIELDS else v) for k, v in payload.items()}
    return json.dumps(payload)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    if settings.IS_PRODUCTION:
        return await call_next(request)

    body = await request.body()
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %s (%.1f ms) %s",
        request.method, request.url.path, response.status_code, elapsed_ms, redact(body),
    )
    return response


# =========================================
# ⚠️ Exception handlers
# =========================================
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid input") if errors else "Invalid input"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message, "errors": json.loads(json.dumps(errors, default=str))},
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("❌ Database error on %s %s", request.method, request.url.path)
    error = Unexpected("A database error occurred. Please try again later.")
    return JSONResponse(status_code=error.status_code, content={"detail": error.detail})


# =========================================
# 📦 Routers
# =========================================
app.include_router(users_router, prefix=f"{API_PREFIX}/users", tags=["Users"])
app.include_router(auth_router, prefix=f"{API_PREFIX}/auth", tags=["Authentication"])
app.include_router(mfa_router, prefix=f"{API_PREFIX}/mfa", tags=["MFA"])
app.include_router(project_router, prefix=f"{API_PREFIX}/projects", tags=["Projects"])
app.include_router(features_router, prefix=f"{API_PREFIX}/features", tags=["Features"])
app.include_router(project_members_router, prefix=f"{API_PREFIX}/project-members", tags=["Project Members"])
app.include_router(tickets_router, prefix=f"{API_PREFIX}/tickets", tags=["Tickets"])


# =========================================
# 🩺 Health Check
# =========================================
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "Backend is running"}


@app.get("/")
def read_root():
    return {"message": "Welcome to PMBoard Backend!"}
