import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import configure_logging, settings
from app.database import create_tables
from app.errors import register_exception_handlers
from app.middleware import RequestLogMiddleware
from app.routers import auth, comments, posts
from app.uploads import URL_PREFIX

logger = logging.getLogger(__name__)

configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    await create_tables()
    logger.info("Blog API started (env=%s)", settings.APP_ENV)
    yield


app = FastAPI(
    title="Blog API",
    description="Posts, comments and admin moderation",
    version="1.0.0",
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestLogMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Routers
app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(comments.router)

app.mount(URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")


@app.get("/health")
async def health():
    return {"status": "healthy", "version": "1.0.0"}
