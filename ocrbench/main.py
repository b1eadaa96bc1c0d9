from __future__ import annotations

from dotenv import load_dotenv
from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .app_logging import configure_logging
from .api.errors import register_exception_handlers
from .api.v1.routers import documents, extractions, images, session

load_dotenv()
configure_logging()

app = FastAPI(title="OCR Workbench", version="0.1.0")

app.add_middleware(
  CORSMiddleware,
  allow_origins=["*"],
  allow_credentials=True,
  allow_methods=["*"],
  allow_headers=["*"],
)

register_exception_handlers(app)

api_router = APIRouter(prefix="/api")
api_router.include_router(session.router)
api_router.include_router(documents.router)
api_router.include_router(extractions.router)
api_router.include_router(images.router)

app.include_router(api_router)
