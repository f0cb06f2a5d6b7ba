from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatstate.api.routes import conversations
from chatstate.core.config import settings
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
app = FastAPI(
    title="Chatstate API",
    description="Conversation rendering state: disclosure, tool counts and citations",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(conversations.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "chatstate-api"}
