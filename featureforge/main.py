import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from featureforge.endpoints.router import api_router
from featureforge.database.session import engine, DatabaseUnavailableError
from featureforge.database.base import Base
from featureforge.config.settings import settings
from featureforge.constants import ErrorMessages
from featureforge.utils.email_service import EmailAnalytics
from featureforge.utils.logging import setup_logging

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create tables if they don't exist
if engine is not None:
    Base.metadata.create_all(bind=engine)
else:
    logger.warning("⚠️ DATABASE_URL is not set, requests needing the database will return 503")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION
)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.email_analytics = EmailAnalytics({})

def _error(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, exc.detail)

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        messages.append(f"{field}: {err.get('msg')}" if field else err.get("msg"))
    return _error(400, "; ".join(messages) or "Invalid request")

@app.exception_handler(DatabaseUnavailableError)
async def database_unavailable_handler(request: Request, exc: DatabaseUnavailableError):
    logger.error(f"❌ {request.method} {request.url.path}: database unavailable")
    return _error(503, ErrorMessages.DATABASE_UNAVAILABLE)

@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"❌ Database error on {request.method} {request.url.path}")
    return _error(500, ErrorMessages.SERVER_ERROR)

# Include API Router
app.include_router(api_router)

@app.get("/")
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}"}
