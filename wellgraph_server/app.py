"""FastAPI application for building and serving well topology results."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wellgraph import __version__
from wellgraph.adapters.sinks import FileSink
from wellgraph.config import Settings, configure_logging
from wellgraph.sdk.result_store import TopologyResultStore
from wellgraph_server.topology_routes import get_store, router as topology_router, set_store

# read once at import; .env is loaded by wellgraph.config
settings = Settings.from_env()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and the lineage mirror on startup."""
    configure_logging(settings)
    if settings.lineage_path:
        set_store(TopologyResultStore(sink=FileSink(settings.lineage_path)))
    yield


app = FastAPI(
    title="Wellgraph API",
    description="API server for well barrier topology builds and request lineage",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# include routes
app.include_router(topology_router, prefix="/api")


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
        "wells": len(get_store().well_ids()),
        "endpoints": {
            "requests": "/api/topology/requests",
            "wells": "/api/topology/wells",
            "lineage": "/api/topology/wells/{well_id}/lineage",
            "inspector": "/api/topology/wells/{well_id}/inspector",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
