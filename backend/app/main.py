import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .content import ContentStore
from .errors import ContentStoreError, LessonNotFound, MalformedLesson
from .metrics import PrometheusMiddleware
from .pages import catalog_page, error_page, lesson_page
from .parser import INTEGER_ID
from .sandbox import build_runner_document

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    config.configure_logging()
    logger.info("Serving lessons from %s", config.LESSONS_DIR)
    yield


app = FastAPI(
    title="Lesson Viewer API",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(PrometheusMiddleware)


def utcnow():
    return datetime.now(timezone.utc)


def get_store() -> ContentStore:
    return ContentStore(config.LESSONS_DIR, allow_raw_html=config.LESSON_ALLOW_RAW_HTML)


def valid_lesson_id(lesson_id: str) -> bool:
    return bool(INTEGER_ID.fullmatch(lesson_id or ""))


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and not request.url.path.startswith("/api/"):
        return error_page("Not found", "There is no page at this address.", 404)
    return JSONResponse(
        {"error": exc.detail},
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error(_: Request, exc: RequestValidationError):
    return JSONResponse({"error": "Invalid request."}, status_code=400)


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error."}, status_code=500)


@app.get("/api/health")
def health(store: ContentStore = Depends(get_store)):
    store_ok = store.root.is_dir()
    return {
        "status": "ok" if store_ok else "degraded",
        "store_ok": store_ok,
        "time": utcnow().isoformat(),
    }


@app.get("/metrics")
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/api/lessons")
def list_lessons(store: ContentStore = Depends(get_store)):
    try:
        lessons = store.list_lessons()
    except ContentStoreError as exc:
        logger.error("Failed to load lessons: %s", exc)
        raise HTTPException(status_code=500, detail="Failed to load lessons.") from exc
    return [lesson.model_dump() for lesson in lessons]


@app.get("/api/lessons/{lesson_id}")
def get_lesson(lesson_id: str, store: ContentStore = Depends(get_store)):
    if not valid_lesson_id(lesson_id):
        raise HTTPException(status_code=400, detail="Invalid lesson id.")
    try:
        lesson = store.get_lesson(int(lesson_id))
        body_html = store.render_body(lesson)
    except LessonNotFound as exc:
        raise HTTPException(status_code=404, detail="Lesson not found.") from exc
    except MalformedLesson as exc:
        raise HTTPException(status_code=500, detail="Invalid lesson structure.") from exc
    except ContentStoreError as exc:
        logger.error("Failed to load lesson %s: %s", lesson_id, exc)
        raise HTTPException(status_code=500, detail="Failed to load lessons.") from exc
    return lesson.public(body_html)


@app.post("/api/sandbox")
async def sandbox_document(request: Request):
    try:
        payload = await request.json()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid payload.") from exc
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid payload.")
    code = payload.get("code")
    if not isinstance(code, str):
        raise HTTPException(status_code=400, detail="Code is required.")
    if len(code) > config.SANDBOX_MAX_CODE_SIZE:
        raise HTTPException(status_code=400, detail="Code is too large.")
    return HTMLResponse(content=build_runner_document(code))


@app.get("/", response_class=HTMLResponse)
def catalog_view(store: ContentStore = Depends(get_store)):
    try:
        lessons = store.list_lessons()
    except ContentStoreError as exc:
        logger.error("Failed to load lessons: %s", exc)
        return error_page("Lessons unavailable", "The lesson catalog could not be loaded.", 500)
    return catalog_page(lessons)


@app.get("/lessons/{lesson_id}", response_class=HTMLResponse)
def lesson_view(lesson_id: str, store: ContentStore = Depends(get_store)):
    if not valid_lesson_id(lesson_id):
        return error_page("Not found", "There is no lesson at this address.", 404)
    try:
        lesson = store.get_lesson(int(lesson_id))
        summaries = store.list_lessons()
    except LessonNotFound:
        return error_page("Lesson not found", f"Lesson {lesson_id} does not exist.", 404)
    except MalformedLesson:
        return error_page("Lesson unavailable", f"Lesson {lesson_id} could not be read.", 500)
    except ContentStoreError as exc:
        logger.error("Failed to load lesson %s: %s", lesson_id, exc)
        return error_page("Lessons unavailable", "The lesson catalog could not be loaded.", 500)
    previous_id, next_id = store.neighbours(lesson.id, summaries)
    return lesson_page(
        lesson,
        store.render_body(lesson),
        total_lessons=len(summaries),
        previous_id=previous_id,
        next_id=next_id,
    )


app.mount(
    "/core",
    StaticFiles(directory=str(Path(config.WEB_DIR) / "core"), check_dir=False),
    name="static",
)


def run():
    import uvicorn

    config.configure_logging()
    uvicorn.run(app, host=config.HOST, port=config.PORT)
