from fastapi import FastAPI, HTTPException, Request
from app.api.v1 import (
    admin,
    auth,
    comment,
    project_router,
    task,
    user,
)
from app.core.config import settings
from app.core.database import database
from app.core.errors import DomainError, InternalError, domain_error_handler
import logging
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError


# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(title="Taskflow API", version="1.0.0")

# Include routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["authentication"])
app.include_router(user.router, prefix="/api/v1/user", tags=["user"])
app.include_router(admin.router, prefix="/api/v1/admin", tags=["admin"])
app.include_router(project_router.router, prefix="/api/v1/projects", tags=["project"])
app.include_router(task.router, prefix="/api/v1/tasks", tags=["task"])
app.include_router(comment.router, prefix="/api/v1/comments", tags=["comment"])

app.add_exception_handler(DomainError, domain_error_handler)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.frontend_url or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return await domain_error_handler(request, InternalError("Internal server error"))


@app.on_event("startup")
def startup_event():
    database.create_all(
        retries=settings.db_connect_retries,
        interval=settings.db_connect_retry_interval,
    )


@app.on_event("shutdown")
def shutdown_event():
    database.close()


@app.get("/")
def read_root():
    return {"message": "Taskflow API", "version": "1.0.0"}


@app.get("/health")
def health_check():
    try:
        database.ping()
        return {"status": "healthy", "database": "connected"}
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Database unhealthy: {str(e)}")
