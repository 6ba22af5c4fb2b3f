from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.v1.router import api_router
from app.core.config import settings
from app.services.employee_store import employee_store
from app.services.view_sessions import form_sessions, listing_sessions

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    try:
        await employee_store.initialize(settings)
    except Exception:
        logger.exception("Failed to initialize EmployeeStore — continuing without store")
    yield
    listing_sessions.clear()
    form_sessions.clear()
    await employee_store.close()


app = FastAPI(
    title="Employee Admin API",
    description="Employee listing and create/edit form backend",
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Employee Admin API"}
