import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .routers.pipeline import router as pipeline_router


# .env values feed LLMSettings and the extraction configs
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def _debug_enabled() -> bool:
    return os.getenv("DEBUG", "false").lower() == "true"


@asynccontextmanager
async def lifespan(app: FastAPI):

    # Startup
    logger.info("Starting Signal Insights Pipeline")
    logger.info(
        "   OpenAI Key:  %s",
        "Configured" if os.getenv("OPENAI_API_KEY") else "Not set (theme extraction will fail)",
    )
    logger.info("   Model:       %s", os.getenv("OPENAI_MODEL", "gpt-4.1"))
    logger.info("   Ready to analyze signals!")

    yield

    logger.info("Shutting down Signal Insights Pipeline")


app = FastAPI(
    title="Signal Insights Pipeline",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",      # Local dashboard
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pipeline_router)


@app.get(
    "/",
    summary="Service Info",
    description="Name, version and the available pipeline endpoints",
    tags=["General"],
)
async def root():
    return {
        "name": "Signal Insights Pipeline",
        "version": __version__,
        "description": "Sentiment, pattern and theme analysis over scraped developer signals",
        "docs": "/docs",
        "endpoints": {
            "run": "POST /pipeline/run - Run the insights pipeline",
            "health": "GET /pipeline/health - Pipeline service health check"
        }
    }


@app.get(
    "/health",
    summary="Liveness Check",
    description="Returns 200 while the API process is up",
    tags=["General"],
)
async def health():
    return {
        "status": "healthy",
        "service": "signalscope",
        "version": __version__
    }


@app.exception_handler(Exception)
async def unhandled_error_handler(request, exc):
    logger.error("Unhandled error on %s: %s", request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "unhandled_error",
            "detail": str(exc) if _debug_enabled() else "Unexpected server error",
        }
    )


def run() -> None:
    """Console entry point: serve the API with uvicorn."""
    uvicorn.run(
        "signalscope.main:app",
        host=os.getenv("SIGNALSCOPE_HOST", "127.0.0.1"),
        port=int(os.getenv("SIGNALSCOPE_PORT", "8000")),
        reload=_debug_enabled(),
    )


if __name__ == "__main__":
    run()
