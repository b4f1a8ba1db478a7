"""
FastAPI application for the WikiLoop Explorer API.

Exposes the dataset store via HTTP endpoints with auto-generated
OpenAPI documentation at /docs.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import log
from .aggregates import accumulate_edits
from .config import Settings, settings
from .data_access import DatasetStore
from .epochs import EpochCache
from .errors import (
    DatasetNotFoundError,
    ExplorerError,
    SearchNotImplementedError,
    UnsupportedSearchError,
)
from .models import (
    CumulativeEditPoint,
    DecisionCount,
    LeaderboardEntry,
    MessageResponse,
    SearchFilter,
)
from .search import build_search_query

logger = logging.getLogger(__name__)

router = APIRouter()


def get_store(request: Request) -> DatasetStore:
    return request.app.state.store


def get_epochs(request: Request) -> EpochCache:
    return request.app.state.epochs


# ----------------------------------------------------------------
# Error handling
# ----------------------------------------------------------------

async def explorer_error_handler(request: Request, exc: ExplorerError):
    logger.warning(f"{request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"{request.method} {request.url.path}: invalid request {exc.errors()}")
    return JSONResponse(status_code=404, content={"message": "Invalid request body!"})


# ----------------------------------------------------------------
# Health & Info
# ----------------------------------------------------------------

@router.get("/", response_model=MessageResponse, tags=["Health"])
def root():
    """API information."""
    return {"message": "Will return you wikiloop datasets."}


# ----------------------------------------------------------------
# Dataset Endpoints
# ----------------------------------------------------------------

@router.get("/dslist", response_model=List[str], tags=["Datasets"])
def get_dataset_list(store: DatasetStore = Depends(get_store)):
    """Get the names of all published datasets."""
    return store.list_datasets()


@router.get("/ds/{dsname}", response_model=List[Dict], tags=["Datasets"])
def get_latest_dataset(
    dsname: str,
    store: DatasetStore = Depends(get_store),
    epochs: EpochCache = Depends(get_epochs)
):
    """Get every row of the newest epoch of a dataset."""
    epoch = epochs.require(dsname)
    return store.dump_rows(dsname, epoch)


@router.get("/ds/{dsname}/{epoch}", response_model=List[Dict], tags=["Datasets"])
def get_dataset(
    dsname: str,
    epoch: str,
    store: DatasetStore = Depends(get_store),
    epochs: EpochCache = Depends(get_epochs)
):
    """
    Get every row of one dataset epoch.

    Args:
        dsname: Dataset name (e.g., 'missingdateofbirth')
        epoch: Epoch token; must be one of /dsepoch/{dsname}
    """
    if epoch not in epochs.resolve(dsname):
        raise DatasetNotFoundError()
    return store.dump_rows(dsname, epoch)


@router.get("/dsepoch/{dsname}", response_model=List[str], tags=["Datasets"])
def get_dataset_epochs(dsname: str, epochs: EpochCache = Depends(get_epochs)):
    """Get the epochs of a dataset, newest first."""
    known = epochs.resolve(dsname)
    if not known:
        raise DatasetNotFoundError()
    return known


@router.get("/dsstats/{dsname}", response_model=List[Dict], tags=["Datasets"])
def get_dataset_stats(
    dsname: str,
    epoch: Optional[str] = Query(None, description="Epoch (defaults to the newest)"),
    store: DatasetStore = Depends(get_store),
    epochs: EpochCache = Depends(get_epochs)
):
    """Get the latest update-count stats of a dataset epoch."""
    epoch = epochs.require(dsname, epoch)
    return store.latest_stats(dsname, epoch)


@router.get("/dsleaderboard/{dsname}", response_model=List[LeaderboardEntry], tags=["Datasets"])
def get_dataset_leaderboard(
    dsname: str,
    epoch: Optional[str] = Query(None, description="Epoch (defaults to the newest)"),
    store: DatasetStore = Depends(get_store),
    epochs: EpochCache = Depends(get_epochs)
):
    """Get users ranked by number of logged edits."""
    epoch = epochs.require(dsname, epoch)
    return store.leaderboard(dsname, epoch)


# ----------------------------------------------------------------
# Game Log Endpoints
# ----------------------------------------------------------------

@router.get(
    "/gamelogs/accumulateedits/{dsname}/{epoch}",
    response_model=List[CumulativeEditPoint],
    tags=["Game Logs"]
)
def get_accumulated_edits(dsname: str, epoch: str, store: DatasetStore = Depends(get_store)):
    """
    Get the running total of logged edits per day.

    Days without edits are omitted.
    """
    series = accumulate_edits(store.edits_by_day(dsname, epoch))
    return [{"date": day, "accumulate_edits": total} for day, total in series]


@router.get(
    "/gamelogs/decisions/{dsname}/{epoch}",
    response_model=List[DecisionCount],
    tags=["Game Logs"]
)
def get_decisions(dsname: str, epoch: str, store: DatasetStore = Depends(get_store)):
    """Get the distribution of editor decisions."""
    return store.decision_counts(dsname, epoch)


# ----------------------------------------------------------------
# Advanced Search
# ----------------------------------------------------------------

@router.post("/advancedsearch", response_model=List[Dict], tags=["Search"])
def advanced_search(
    search: SearchFilter,
    store: DatasetStore = Depends(get_store),
    epochs: EpochCache = Depends(get_epochs)
):
    """
    Filter a dataset epoch by entity ids and languages.

    Only missing-value datasets support advanced search.
    """
    if "missing" in search.dsname:
        if search.epoch not in epochs.resolve(search.dsname):
            raise DatasetNotFoundError()
        return store.run(build_search_query(search))
    if "catfacts" in search.dsname:
        raise SearchNotImplementedError()
    raise UnsupportedSearchError()


# ----------------------------------------------------------------
# App factory
# ----------------------------------------------------------------

def create_app(app_settings: Optional[Settings] = None, store: Optional[DatasetStore] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        app_settings: Configuration (defaults to the environment settings)
        store: Dataset store to serve from (opened from app_settings when omitted)
    """
    app_settings = app_settings or settings
    log.setup_logging(app_settings.LOG_LEVEL, app_settings.LOG_FILE)

    app = FastAPI(
        title=app_settings.API_TITLE,
        description=app_settings.API_DESCRIPTION,
        version=app_settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if store is None:
        try:
            store = DatasetStore(
                data_dir=app_settings.DATA_DIR,
                metadata_schema=app_settings.METADATA_SCHEMA,
                datasets=app_settings.DATASETS,
                timeout=app_settings.DB_TIMEOUT
            )
            logger.info(f"Connected to dataset store: {store.data_dir}")
        except Exception as e:
            logger.error(f"Failed to open dataset store: {e}")
            raise

    app.state.store = store
    app.state.epochs = EpochCache(store, app_settings.DATASETS)

    app.add_exception_handler(ExplorerError, explorer_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(router)

    @app.on_event("shutdown")
    def shutdown_event():
        """Close database connection on shutdown."""
        store.close()
        logger.info("Database connection closed")

    return app


def run():
    """Start the API server."""
    import uvicorn

    app = create_app()
    log.header(settings.API_TITLE)
    log.ok(f"App listening on port {settings.PORT}")
    log.info("Press Ctrl+C to quit.")
    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    run()
