import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import redis
from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app import errors
from app.config import Settings
from app.logging_setup import setup_logging
from app.models import TaskCreate, TaskUpdate
from app.responses import shape_failure, shape_page, shape_success
from app.result import Result
from app.service import TaskService
from app.store import RedisTaskStore, StoreError, TaskStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_service(request: Request) -> TaskService:
    return request.app.state.service


def respond(result: Result, status_code: int = 200, message: Optional[str] = None) -> JSONResponse:
    if not result.ok:
        return JSONResponse(status_code=result.error.status_code, content=shape_failure(result.error))
    return JSONResponse(status_code=status_code, content=shape_success(result.value, message))


@router.get("")
def list_tasks(
    status: Optional[str] = Query(default=None),
    search: Optional[str] = Query(default=None),
    page: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    service: TaskService = Depends(get_service),
):
    result = service.list_tasks(status=status, search=search, page=page, limit=limit)
    if not result.ok:
        return respond(result)
    return JSONResponse(content=shape_page(result.value))


@router.get("/stats")
def task_stats(service: TaskService = Depends(get_service)):
    return respond(service.stats())


@router.get("/status/{status}")
def tasks_by_status(status: str, service: TaskService = Depends(get_service)):
    result = service.list_by_status(status)
    if not result.ok:
        return respond(result)
    return JSONResponse(content=shape_success(result.value, count=len(result.value), status=status))


@router.get("/{task_id}")
def get_task(task_id: str, service: TaskService = Depends(get_service)):
    return respond(service.get_task(task_id))


@router.post("")
def create_task(task: TaskCreate, service: TaskService = Depends(get_service)):
    return respond(service.create_task(task), status_code=201, message="Task created successfully")


@router.api_route("/{task_id}", methods=["PUT", "PATCH"])
def update_task(task_id: str, updates: TaskUpdate, service: TaskService = Depends(get_service)):
    return respond(service.update_task(task_id, updates), message="Task updated successfully")


@router.delete("/{task_id}")
def delete_task(task_id: str, service: TaskService = Depends(get_service)):
    return respond(service.delete_task(task_id), message="Task deleted successfully")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    store = app.state.store
    client = None
    if store is None:
        logger.info("Connecting to redis host=%s port=%s db=%s", settings.redis_host, settings.redis_port, settings.redis_db)
        client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            password=settings.redis_password,
            decode_responses=True,
        )
        store = RedisTaskStore(client)
        try:
            store.ping()
        except StoreError as e:
            logger.warning("Redis not reachable at startup: %s", e)
    app.state.service = TaskService(store)
    try:
        yield
    finally:
        if client is not None:
            client.close()
            logger.info("Redis connection closed")


def create_app(settings: Optional[Settings] = None, store: Optional[TaskStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    app = FastAPI(title="Task Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    @app.get("/health")
    def health(service: TaskService = Depends(get_service)):
        try:
            service.store.ping()
        except StoreError as e:
            logger.warning("Health check failed: %s", e)
            return JSONResponse(status_code=503, content={"status": "degraded"})
        return {"status": "healthy"}

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = f"Route {request.url.path} not found"
        else:
            message = str(exc.detail)
        body = {"success": False, "message": message}
        return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        problems = []
        for err in exc.errors():
            loc = [str(p) for p in err.get("loc", ()) if p != "body"]
            problems.append(f"{'.'.join(loc)}: {err.get('msg')}" if loc else err.get("msg"))
        error = errors.validation(problems)
        return JSONResponse(status_code=error.status_code, content=shape_failure(error))

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content=shape_failure(errors.storage("Internal server error")))

    if settings.log_requests:
        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            start = time.perf_counter()
            response = await call_next(request)
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method,
                request.url.path,
                response.status_code,
                (time.perf_counter() - start) * 1000,
            )
            return response

    app.include_router(router, prefix=settings.api_prefix)
    return app


_settings = Settings.from_env()
setup_logging(_settings.log_level)
app = create_app(_settings)
