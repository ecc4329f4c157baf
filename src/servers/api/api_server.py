"""FastAPI application serving the relational and graph stores."""

from contextlib import asynccontextmanager
from logging import getLogger
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from database.database import create_graph_manager, create_relational_manager
from graphapp import __version__
from graphapp.config import AppConfig
from servers.api.routes import graph_router, health_router, relational_router
from services import create_services, seed_sample_graph

logger = getLogger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed request bodies and parameters as 400 Bad Request."""
    logger.warning(f"Rejected request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the API application.

    Args:
        config: Server configuration; read from the environment when omitted

    Returns:
        The FastAPI application. Stores are connected when its lifespan starts.
    """
    if config is None:
        config = AppConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        graph_db = create_graph_manager(config.graph_db_url, echo=config.db_echo)
        relational_db = create_relational_manager(
            config.relational_db_url, echo=config.db_echo
        )
        try:
            for manager in (graph_db, relational_db):
                await manager.connect()
                await manager.create_tables()
            logger.info("Graph and relational stores connected")

            services = create_services(graph_db, relational_db)
            for name, service in services.items():
                setattr(app.state, name, service)

            if config.seed_sample_data:
                await seed_sample_graph(services["graph_service"])

            logger.info("Server ready")
            yield
        finally:
            await graph_db.close()
            await relational_db.close()
            logger.info("Stores closed")

    app = FastAPI(
        title="GraphApp Server",
        description="CRUD and search over a relational store and a property graph.",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    # Register routers
    app.include_router(health_router)
    app.include_router(graph_router)
    app.include_router(relational_router)

    return app
