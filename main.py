# main.py - App Setup and Configuration Only

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

# Import route modules
from routes import user_routes, meeting_routes
from database import DIContainer
from error_handler import register_exception_handlers
from config_manager import get_config

# Initialize configuration
config = get_config()

# Configure logging based on config
log_level = getattr(logging, str(config.get('logging.level', 'INFO')).upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# =============================================================================
# LIFESPAN EVENTS
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the store for the lifetime of the process and always close it"""
    container = DIContainer(app.state.database_path)
    await container.start()
    app.state.container = container

    logger.info("Meetings API started")
    try:
        yield  # Application runs here
    finally:
        await container.close()
        logger.info("Meetings API shutting down")

# =============================================================================
# APP CONFIGURATION
# =============================================================================

def create_app(database_path: str = None) -> FastAPI:
    """Create and configure FastAPI application"""

    app = FastAPI(
        title="Meetings API",
        description="Schedule meetings between registered users",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.config = config
    app.state.database_path = database_path or config.get_database_path()

    # CORS middleware with config-based origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.get_allowed_origins(),
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type"],
    )

    register_exception_handlers(app)

    # Include route modules
    app.include_router(user_routes.router, prefix="/api", tags=["users"])
    app.include_router(meeting_routes.router, prefix="/api", tags=["meetings"])

    @app.get("/")
    async def health_check():
        """Health check endpoint"""
        return {"message": "Meetings API Service is running!"}

    return app

app = create_app()

# =============================================================================
# DEVELOPMENT SERVER
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    host = config.get('server.host', '0.0.0.0')
    port = config.get('server.port', 5000)
    reload = config.get('server.reload', False)

    # Set log level based on debug mode
    uvicorn_log_level = "debug" if config.get('server.debug', False) else "info"

    uvicorn.run("main:app", host=host, port=port, reload=reload, log_level=uvicorn_log_level)
