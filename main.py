import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.staticfiles import StaticFiles

import config
from database import init_db
from routers import auth, author, comment, notification, post, upload
from utils.errors import register_exception_handlers

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# =========================
# DB initialisation (tables from models)
# =========================
init_db()

# =========================
# FastAPI app
# =========================
app = FastAPI(
    title="Tech Blog API",
    description="Posts, comments, reactions and notifications for the tech blog",
    version="0.1.0",
)

# =========================
# CORS
# =========================
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# =========================
# Static files served by LocalStorage
# =========================
os.makedirs(config.UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=config.UPLOAD_DIR), name="uploads")

register_exception_handlers(app)

# =========================
# Routers
# =========================
app.include_router(auth.router)
app.include_router(post.router)
app.include_router(comment.router)
app.include_router(notification.router)
app.include_router(author.router)
app.include_router(upload.router)


# =========================
# Root endpoint
# =========================
@app.get("/")
def root():
    return {"message": "Welcome to the Tech Blog API"}


logger.info("Application started with %s storage", config.STORAGE_TYPE)
