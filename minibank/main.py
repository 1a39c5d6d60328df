"""
FastAPI application factory and entry point.

create_app() is the composition root:
  1. Record store — built here (or injected by tests), kept on app.state
  2. Lifespan — creates tables at startup, disposes connections at shutdown
  3. CORS middleware — allows the browser client's origins
  4. Exception handlers — map domain errors to HTTP responses
  5. Routers — the /account endpoints

Running locally:
    uvicorn minibank.main:app --reload
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from minibank.config import settings
from minibank.database import RecordStore
from minibank.exceptions import register_exception_handlers
from minibank.logging_config import setup_logging
from minibank.routers import accounts


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Creates the tables if they don't exist.

    Shutdown:
      Disposes of the record store engine, closing all connections.
    """
    store: RecordStore = app.state.store
    await store.create_schema()
    yield
    await store.close()


def create_app(store: RecordStore | None = None) -> FastAPI:
    """
    Build a configured application.

    Args:
        store: Record store to serve from. Defaults to one built from
               settings.DATABASE_URL.
    """
    logger = setup_logging(settings.LOG_LEVEL)

    if store is None:
        store = RecordStore(settings.DATABASE_URL, echo=settings.DEBUG)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Minimal banking API: accounts, login, deposits and withdrawals",
        lifespan=lifespan,
    )
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        # Login returns the JWT in this header
        expose_headers=["Authorization"],
    )

    register_exception_handlers(app)

    app.include_router(accounts.router, prefix="/account", tags=["Account"])

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Liveness check for load balancers and orchestrators."""
        return {"status": "ok", "version": settings.APP_VERSION}

    logger.info("Application created", extra={"resource": settings.APP_NAME})
    return app


app = create_app()
