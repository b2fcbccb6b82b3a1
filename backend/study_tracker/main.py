"""FastAPI application entrypoint and HTTP controllers.

This module defines the HTTP endpoints of the study tracker backend.
Controllers are intentionally thin: they resolve the owner from the
`user-id` header, delegate to an owner-bound repository, and return the
stored documents as JSON.

Endpoints implemented (all under /api, all requiring `user-id`):
- GET, POST /subjects; PUT, DELETE /subjects/{id}
- GET, POST /schedule; PUT, DELETE /schedule/{id}
- GET, POST /goals; PUT, DELETE /goals/{id}
- GET, POST /grades; DELETE /grades/{id}
- GET, POST /documents; DELETE /documents/{id}
- GET, PUT /settings
- GET, PUT /stats

Store failures are answered with HTTP 500 and `{"error": message}`.
"""

from fastapi import FastAPI, Depends, Header, Body, Request
from fastapi.responses import JSONResponse, HTMLResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from typing import Any, Optional
import json
import logging
import time
import traceback
import uuid
from .database import create_db_and_tables, get_session
from . import errors, repositories
from .config import settings

app = FastAPI(
    title="Study Tracker API",
    version="1.0.0",
    description="Per-user subjects, schedule, goals, grades, documents, settings and stats.",
    docs_url="/api-docs",
    redoc_url=None,
)
logger = logging.getLogger("study_tracker.api")
if not logger.handlers:
    logging.basicConfig(level=settings.LOG_LEVEL)

if settings.ALLOW_DEV_CORS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

create_db_and_tables()


@app.middleware("http")
async def limit_body_size(request: Request, call_next):
    length = request.headers.get("content-length")
    if length and length.isdigit() and int(length) > settings.MAX_BODY_BYTES:
        return JSONResponse(status_code=413, content={"error": "request entity too large"})
    return await call_next(request)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
    request.state.request_id = req_id
    started = time.perf_counter()
    context = {
        "request_id": req_id,
        "path": request.url.path,
        "method": request.method,
        "user_id": request.headers.get("user-id"),
        "client": request.client.host if request.client else "unknown",
    }
    response: Response
    try:
        response = await call_next(request)
    except Exception:
        context["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.exception("request_failed %s", json.dumps(context, ensure_ascii=True))
        raise
    response.headers["X-Request-ID"] = req_id
    if request.url.path.startswith("/api/"):
        context["status_code"] = response.status_code
        context["duration_ms"] = round((time.perf_counter() - started) * 1000.0, 2)
        logger.info("request_done %s", json.dumps(context, ensure_ascii=True))
    return response


@app.exception_handler(errors.StoreError)
async def store_error_handler(request: Request, exc: errors.StoreError):
    logger.error(
        "store_error %s",
        json.dumps({"path": request.url.path, "method": request.method, "error": str(exc)}, ensure_ascii=True),
    )
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(errors.MissingOwnerError)
async def missing_owner_handler(request: Request, exc: errors.MissingOwnerError):
    return JSONResponse(status_code=401, content={"error": str(exc)})


def get_user_id(user_id: Optional[str] = Header(default=None, alias="user-id")) -> str:
    """Return the owner identifier sent in the `user-id` header.

    The header is trusted as-is; there is no authentication behind it.
    """
    if user_id is None or not user_id.strip():
        raise errors.MissingOwnerError("user-id header required")
    return user_id


def owned(repo_cls):
    """Build a dependency yielding `repo_cls` bound to the request's owner."""
    def dependency(db: Session = Depends(get_session), user_id: str = Depends(get_user_id)):
        return repo_cls(db, user_id)
    return dependency


subjects_repo = owned(repositories.SubjectRepository)
schedule_repo = owned(repositories.ScheduleRepository)
goals_repo = owned(repositories.GoalRepository)
grades_repo = owned(repositories.GradeRepository)
documents_repo = owned(repositories.DocumentRepository)
settings_repo = owned(repositories.SettingsRepository)
stats_repo = owned(repositories.StatsRepository)


@app.get('/api/subjects', tags=['Subjects'])
def list_subjects(repo: repositories.SubjectRepository = Depends(subjects_repo)):
    """List the caller's subjects with their notes and materials."""
    return repo.list_all()

@app.post('/api/subjects', tags=['Subjects'])
def create_subject(payload: Any = Body(default=None), repo: repositories.SubjectRepository = Depends(subjects_repo)):
    """Create a subject. `name` is required."""
    return repo.create(payload)

@app.put('/api/subjects/{subject_id}', tags=['Subjects'])
def update_subject(subject_id: str, payload: Any = Body(default=None), repo: repositories.SubjectRepository = Depends(subjects_repo)):
    """Update a subject and re-validate the result.

    `_id`, `__v` and the client `id` in the body are ignored. Answers 404
    when the caller owns no subject with this id; other failures include
    a `details` traceback.
    """
    try:
        return repo.update(subject_id, payload)
    except errors.NotFoundError:
        return JSONResponse(status_code=404, content={"error": "Subject not found"})
    except errors.StoreError as exc:
        logger.exception("subject_update_failed id=%s", subject_id)
        return JSONResponse(status_code=500, content={"error": str(exc), "details": traceback.format_exc()})

@app.delete('/api/subjects/{subject_id}', tags=['Subjects'])
def delete_subject(subject_id: str, repo: repositories.SubjectRepository = Depends(subjects_repo)):
    repo.delete(subject_id)
    return {'message': 'Subject deleted'}


@app.get('/api/schedule', tags=['Schedule'])
def list_schedule(repo: repositories.ScheduleRepository = Depends(schedule_repo)):
    return repo.list_all()

@app.post('/api/schedule', tags=['Schedule'])
def create_schedule(payload: Any = Body(default=None), repo: repositories.ScheduleRepository = Depends(schedule_repo)):
    """Create a schedule entry. `date` and `timeSlot` are required."""
    return repo.create(payload)

@app.put('/api/schedule/{entry_id}', tags=['Schedule'])
def update_schedule(entry_id: str, payload: Any = Body(default=None), repo: repositories.ScheduleRepository = Depends(schedule_repo)):
    """Update a schedule entry; answers `null` when the caller owns no such entry."""
    try:
        return repo.update(entry_id, payload)
    except errors.NotFoundError:
        return None

@app.delete('/api/schedule/{entry_id}', tags=['Schedule'])
def delete_schedule(entry_id: str, repo: repositories.ScheduleRepository = Depends(schedule_repo)):
    repo.delete(entry_id)
    return {'message': 'Schedule deleted'}


@app.get('/api/goals', tags=['Goals'])
def list_goals(repo: repositories.GoalRepository = Depends(goals_repo)):
    return repo.list_all()

@app.post('/api/goals', tags=['Goals'])
def create_goal(payload: Any = Body(default=None), repo: repositories.GoalRepository = Depends(goals_repo)):
    return repo.create(payload)

@app.put('/api/goals/{goal_id}', tags=['Goals'])
def update_goal(goal_id: str, payload: Any = Body(default=None), repo: repositories.GoalRepository = Depends(goals_repo)):
    """Update a goal; answers `null` when the caller owns no such goal."""
    try:
        return repo.update(goal_id, payload)
    except errors.NotFoundError:
        return None

@app.delete('/api/goals/{goal_id}', tags=['Goals'])
def delete_goal(goal_id: str, repo: repositories.GoalRepository = Depends(goals_repo)):
    repo.delete(goal_id)
    return {'message': 'Goal deleted'}


@app.get('/api/grades', tags=['Grades'])
def list_grades(repo: repositories.GradeRepository = Depends(grades_repo)):
    return repo.list_all()

@app.post('/api/grades', tags=['Grades'])
def create_grade(payload: Any = Body(default=None), repo: repositories.GradeRepository = Depends(grades_repo)):
    return repo.create(payload)

@app.delete('/api/grades/{grade_id}', tags=['Grades'])
def delete_grade(grade_id: str, repo: repositories.GradeRepository = Depends(grades_repo)):
    repo.delete(grade_id)
    return {'message': 'Grade deleted'}


@app.get('/api/documents', tags=['Documents'])
def list_documents(repo: repositories.DocumentRepository = Depends(documents_repo)):
    """List the caller's documents, including their inline data."""
    return repo.list_all()

@app.post('/api/documents', tags=['Documents'])
def create_document(payload: Any = Body(default=None), repo: repositories.DocumentRepository = Depends(documents_repo)):
    return repo.create(payload)

@app.delete('/api/documents/{document_id}', tags=['Documents'])
def delete_document(document_id: str, repo: repositories.DocumentRepository = Depends(documents_repo)):
    repo.delete(document_id)
    return {'message': 'Document deleted'}


@app.get('/api/settings', tags=['Settings'])
def get_settings(repo: repositories.SettingsRepository = Depends(settings_repo)):
    """Return the caller's settings, creating an empty record on first read."""
    return repo.get_or_create()

@app.put('/api/settings', tags=['Settings'])
def put_settings(payload: Any = Body(default=None), repo: repositories.SettingsRepository = Depends(settings_repo)):
    """Write the supplied settings fields, creating the record if absent."""
    return repo.upsert(payload)


@app.get('/api/stats', tags=['Stats'])
def get_stats(repo: repositories.StatsRepository = Depends(stats_repo)):
    """Return the caller's stats, creating an empty record on first read."""
    return repo.get_or_create()

@app.put('/api/stats', tags=['Stats'])
def put_stats(payload: Any = Body(default=None), repo: repositories.StatsRepository = Depends(stats_repo)):
    return repo.upsert(payload)


@app.get("/", response_class=HTMLResponse)
def home():
    """Minimal homepage for quick manual testing."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="UTF-8" />
      <title>Study Tracker API</title>
      <style>
        body { font-family: Arial, sans-serif; margin: 32px; }
        a { color: #0a6; }
        .card { max-width: 640px; padding: 16px; border: 1px solid #ddd; border-radius: 8px; }
      </style>
    </head>
    <body>
      <div class="card">
        <h1>Study Tracker API</h1>
        <p>Browse the endpoints in the <a href="/api-docs">API explorer</a>.</p>
        <p>Every <code>/api</code> call needs a <code>user-id</code> header; records are stored per user.</p>
      </div>
    </body>
    </html>
    """


@app.get("/health")
def health():
    """Lightweight health check for uptime monitoring."""
    return {"status": "ok"}
