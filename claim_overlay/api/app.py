"""FastAPI application for the claim overlay service."""

import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..infrastructure.dependencies import get_service_container
from .endpoints import claims, health

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the verification provider on startup and release it on shutdown."""
    container = get_service_container()
    logging.getLogger().setLevel(container.config.log_level)
    try:
        await container.get_verification_provider()
    except Exception as e:
        logger.warning(f"⚠️ Failed to initialize verification provider: {e}")

    yield  # Application runs here

    await container.shutdown()


# Create FastAPI application
app = FastAPI(
    title="Claim Overlay API",
    description="Claim detection, scoring and verification for web pages",
    version=health.VERSION,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(claims.router)
