# squadboard/main.py

import logging
import os
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

# ---------------- ENV ----------------
load_dotenv(dotenv_path=os.path.join(os.path.dirname(__file__), ".env"))

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("squadboard")

app = FastAPI(title="Squadboard Task API")

# ---------------- CORS ----------------
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

frontend_origin = os.getenv("FRONTEND_ORIGIN")
if frontend_origin:
    origins.append(frontend_origin)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------- DATABASE INIT ----------------
from squadboard.database import Base, engine, SessionLocal  # noqa: E402
from squadboard.models.person import Person  # noqa: F401,E402
from squadboard.models.task import Task, TaskAthlete  # noqa: F401,E402
from squadboard.models.comment import TaskComment  # noqa: F401,E402

logger.info("Checking database models...")
Base.metadata.create_all(bind=engine)
logger.info("Database ready.")


# ---------------- ERRORS ----------------
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("database_error", extra={"path": request.url.path, "method": request.method})
    return JSONResponse(status_code=500, content={"detail": "Failed to handle task request"})


# ---------------- ROUTERS ----------------
from squadboard.task.task_router import router as task_router  # noqa: E402
from squadboard.task.comment_router import router as comment_router  # noqa: E402
from squadboard.person.person_router import router as person_router  # noqa: E402

app.include_router(task_router, prefix="/api")
app.include_router(comment_router, prefix="/api")
app.include_router(person_router, prefix="/api")


# ---------------- HEALTH ----------------
@app.get("/api/health")
def health():
    timestamp = datetime.now(timezone.utc).isoformat()
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("health_check_failed", extra={"error_type": type(exc).__name__})
        return JSONResponse(
            status_code=500,
            content={"status": "error", "database": "disconnected", "timestamp": timestamp},
        )
    finally:
        db.close()
    return {"status": "ok", "database": "connected", "timestamp": timestamp}
