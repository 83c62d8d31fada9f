from __future__ import annotations  # FastAPI server exposing the mock interview API

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import questions_router, session_router
from config.settings import settings

logger = logging.getLogger(__name__)

DEV_ORIGINS = ["http://localhost:3000", "http://localhost:4173"]

app = FastAPI(title="AI Mock Interview API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.CLIENT_ORIGIN, *DEV_ORIGINS],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> str:  # Liveness probe
    return "ok"


app.include_router(questions_router)
app.include_router(session_router)

logger.info("Interview API ready (storage=%s, llm=%s)", settings.STORAGE_BACKEND, settings.LLM_PROVIDER)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api_server:app", host="0.0.0.0", port=8000)
