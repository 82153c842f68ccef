import logging
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskflow.config import get_settings
from taskflow.database import Base, engine
from taskflow.routers import task, user
from taskflow.services.scheduler import storage_scheduler

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("taskflow")

app = FastAPI(title="Taskflow API")

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Every error leaves the API as {"message": ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "errors": errors},
    )

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error"},
    )

# Route registration
app.include_router(user.router, prefix="/api/users", tags=["Users"])
app.include_router(task.router, prefix="/api/tasks", tags=["Tasks"])

# Uploaded attachments are served as-is
upload_dir = Path(settings.upload_dir)
upload_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    logger.info("Starting Taskflow API...")
    Base.metadata.create_all(bind=engine)
    storage_scheduler.start()

@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Taskflow API...")
    storage_scheduler.stop()

# Root route
@app.get("/")
def read_root():
    return {"message": "Taskflow API"}

@app.get("/health")
def health():
    return {"status": "ok"}

@app.get("/scheduler/status")
def get_scheduler_status():
    """Get scheduler status and job information"""
    return storage_scheduler.get_status()
