import logging

from fastapi import FastAPI

from app.core.logging_middleware import LoggingMiddleware
from app.db.init_db import init_db
from app.routers.progress import router as progress_router

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Progress Rollup")

# Middleware
app.add_middleware(LoggingMiddleware)


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers (prefix "/modules" lives on the router)
app.include_router(progress_router)
