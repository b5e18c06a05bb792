import os
import sys
import logging
from contextlib import asynccontextmanager

# Ensure this directory is in the path when started from the repo root
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from config import CORS_ORIGINS, FRONTEND_DIR, LOG_LEVEL, APP_VERSION
from database import init_db
from errors import NoteNovaError, ValidationError
from routes.auth_routes import router as auth_router
from routes.note_routes import router as note_router
from routes.search_routes import router as search_router
from routes.upload_routes import router as upload_router
from routes.ai_routes import router as ai_router

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="NoteNova", version=APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Error handlers ────────────────────────────────────────────────
@app.exception_handler(NoteNovaError)
async def notenova_error_handler(request: Request, exc: NoteNovaError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = []
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        errors.append(f"{field}: {err.get('msg')}" if field else err.get("msg", "Invalid value"))
    error = ValidationError("Validation failed", errors)
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Something went wrong!"})


app.include_router(auth_router)
app.include_router(note_router)
app.include_router(search_router)
app.include_router(upload_router)
app.include_router(ai_router)


# ── Frontend ──────────────────────────────────────────────────────
if os.path.isdir(FRONTEND_DIR):
    static_dir = os.path.join(FRONTEND_DIR, "static")
    if os.path.isdir(static_dir):
        app.mount("/static", StaticFiles(directory=static_dir), name="static")

    # Serve index.html for every non-API path so client-side routing works
    @app.get("/{full_path:path}", include_in_schema=False)
    async def serve_spa(full_path: str):
        if full_path.startswith("api/"):
            return JSONResponse(status_code=404, content={"message": "Endpoint not found"})

        root = os.path.realpath(FRONTEND_DIR)
        requested = os.path.realpath(os.path.join(root, full_path))
        if full_path and requested.startswith(root + os.sep) and os.path.isfile(requested):
            return FileResponse(requested)
        return FileResponse(os.path.join(FRONTEND_DIR, "index.html"))
else:
    @app.get("/", include_in_schema=False)
    async def fallback():
        return {"status": "NoteNova backend is running, but the frontend build was not found."}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "5000")), reload=True)
