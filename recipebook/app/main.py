# recipebook/app/main.py
from __future__ import annotations

import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from recipebook.app.config import settings
from recipebook.app.routers.parse_recipe import router as parse_recipe_router
from recipebook.app.routers.recipes import router as recipes_router
from recipebook.services import telemetry

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

app = FastAPI(title="Recipe Book API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(parse_recipe_router)
app.include_router(recipes_router)


@app.on_event("shutdown")
async def shutdown() -> None:
    await telemetry.drain_pending()


@app.get("/health")
def health():
    return {"ok": True}
