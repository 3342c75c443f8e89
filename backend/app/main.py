# app/main.py
import os
import time
import logging
import uuid
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.routers.exercises import router as exercises_router
from app.routers.workouts import router as workouts_router
from app.routers.sets import router as sets_router
from app.routers.prs import router as prs_router
from app.routers.progress import router as progress_router
from app.routers.history import router as history_router
from app.db import SessionLocal  # for healthz DB check

log = logging.getLogger("uvicorn")

app = FastAPI(
    title="LiftLog API",
    openapi_tags=[
        {"name": "exercises", "description": "Exercise catalogue"},
        {"name": "workouts", "description": "Workouts grouping logged sets"},
        {"name": "sets", "description": "Logged sets; writes keep personal records current"},
        {"name": "prs", "description": "Personal records and 1000 lb club progress"},
        {"name": "progress", "description": "Per-day progress series for charts"},
        {"name": "history", "description": "Training days and exercise badges"},
    ],
)


# CORS (relax for local dev; tighten origins in prod via env)
ALLOW_ORIGINS = os.getenv("ALLOW_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = req_id
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = req_id
    log.info("rid=%s %s %s -> %s in %.1fms",
             req_id, request.method, request.url.path, response.status_code, duration_ms)
    return response

@app.exception_handler(SQLAlchemyError)
async def store_unavailable(request: Request, exc: SQLAlchemyError):
    # The request's session is closed (and rolled back) by get_db; nothing partial is committed
    log.error("rid=%s store error on %s %s: %s",
              getattr(request.state, "request_id", "-"), request.method, request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "store unavailable", "retryable": True})

@app.get("/")
def root():
    return {"ok": True, "name": "LiftLog API"}

@app.get("/ping")
def ping():
    return {"pong": True}

@app.get("/healthz")
def healthz():
    # Quick DB sanity check
    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        return {"status": "ok"}
    except Exception as e:
        return {"status": "degraded", "error": str(e)}

@app.get("/version")
def version():
    return {"version": os.getenv("API_VERSION", "dev")}

# Routers
app.include_router(exercises_router)
app.include_router(workouts_router)
app.include_router(sets_router)
app.include_router(prs_router)
app.include_router(progress_router)
app.include_router(history_router)
