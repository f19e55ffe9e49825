import os
import importlib
import logging
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from config.database import engine, Base, SessionLocal
from config.logging_config import setup_logging
from config.settings import settings
from models.index import register_models
from utils.errors import AppError, app_error_handler

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

register_models()
Base.metadata.create_all(bind=engine)

@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler = None
    if settings.SCHEDULER_ENABLED:
        from api.tasks.scheduler import start_scheduler
        scheduler = start_scheduler(SessionLocal)
    yield
    if scheduler is not None:
        scheduler.shutdown(wait=False)

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)
# CORS: use our parsed list
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["Authorization", "Content-Type"],
)

#load all routes
def load_routes(directory: Path):
    routers = []
    for item in sorted(directory.rglob("*_routes.py")):
        rel = item.relative_to(directory.parent)
        module = importlib.import_module(".".join(rel.with_suffix("").parts))
        if hasattr(module, "router"):
            routers.append(module.router)
    return routers

for router in load_routes(Path(__file__).parent / "api"):
    app.include_router(router, prefix="/api")

@app.get("/health")
def health_check():
    return {"status": "ok"}

@app.get("/")
def home():
    return {"message": "Welcome"}

if __name__ == "__main__":
    import uvicorn
    port = int(os.environ.get("PORT", settings.PORT or 8000))
    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=settings.DEBUG)
