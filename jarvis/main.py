# Run from project root: uvicorn jarvis.main:app --reload

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from jarvis.api.routes import router
from jarvis.core.config import DOCUMENT_PATH, LOG_LEVEL
from jarvis.services.ingestion_service import ingest_document

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if DOCUMENT_PATH:
        try:
            await ingest_document(DOCUMENT_PATH)
        except Exception:
            # Index stays empty; lookups raise EmptyIndexError.
            logger.exception("Failed to ingest %s", DOCUMENT_PATH)
    else:
        logger.info("DOCUMENT_PATH not set; no document indexed")
    yield


app = FastAPI(title="pico-jarvis", lifespan=lifespan)
app.include_router(router)
