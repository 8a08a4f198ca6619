from __future__ import annotations

import logging
import math
import threading
from datetime import datetime, timezone
from typing import List, Optional

import numpy as np
import pandas as pd
from fastapi import APIRouter, FastAPI, File, Form, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import CredentialRequest, DatasetWriteRequest, ScopeFiltersModel
from core.aggregation import countries_for_regions
from core.config import Settings
from core.data import (
    Dataset,
    dataset_from_payload,
    dataset_to_payload,
    is_supported_workbook,
    load_letter_workbook,
    require_records,
)
from core.errors import AuthorizationError, EmptyResultError, NotFoundError, ParseError
from core.filters import normalize_filters
from core.metrics_overview import compute_dashboard, compute_year_summaries
from core.security import require_credential
from core.store import DatasetStore, build_store


logger = logging.getLogger(__name__)
router = APIRouter()

UNSUPPORTED_FILE_MESSAGE = "Please upload a valid Excel file (.xlsx or .xls)"

_STATUS_BY_ERROR = {
    ParseError: 400,
    AuthorizationError: 401,
    NotFoundError: 404,
    EmptyResultError: 422,
}


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(exc: Exception, route: str) -> JSONResponse:
    status = 500
    for err_type, code in _STATUS_BY_ERROR.items():
        if isinstance(exc, err_type):
            status = code
            break
    if status == 500:
        logger.exception("%s failed", route)
    else:
        logger.info("%s rejected: %s", route, exc)
    return JSONResponse(status_code=status, content={"error": str(exc), "type": type(exc).__name__})


def _store(request: Request) -> DatasetStore:
    return request.app.state.store


def _active_dataset(request: Request) -> Dataset:
    """Rebuild the stored dataset once per stored version."""
    doc = _store(request).load()
    if doc is None:
        raise NotFoundError("No data available")
    state = request.app.state
    with state.dataset_lock:
        cached = state.dataset_cache
        if cached is not None and cached[0] == doc.updated_at:
            return cached[1]
        dataset = dataset_from_payload(doc.data)
        state.dataset_cache = (doc.updated_at, dataset)
        return dataset


@router.get("/health")
def health(request: Request):
    store = _store(request)
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        store.ping()
    except Exception as exc:
        logger.exception("health check failed")
        return JSONResponse(
            status_code=500,
            content={"status": "error", "store": store.backend, "error": str(exc), "timestamp": timestamp},
        )
    return _json({"status": "ok", "store": store.backend, "timestamp": timestamp})


@router.get("/data")
def get_data(request: Request):
    try:
        doc = _store(request).load()
        if doc is None:
            return _json({"data": None, "updatedAt": None})
        return _json({"data": doc.data, "updatedAt": doc.updated_at.isoformat()})
    except Exception as exc:
        return _error(exc, "get_data")


@router.post("/data")
def put_data(body: DatasetWriteRequest, request: Request):
    try:
        store = _store(request)
        require_credential(body.password, request.app.state.settings.admin_password)
        dataset = dataset_from_payload(body.data)
        store.save(dataset_to_payload(dataset), body.password)
        return _json({"success": True})
    except Exception as exc:
        return _error(exc, "put_data")


@router.delete("/data")
def delete_data(body: CredentialRequest, request: Request):
    try:
        _store(request).clear(body.password)
        return _json({"success": True})
    except Exception as exc:
        return _error(exc, "delete_data")


@router.post("/upload")
def upload(request: Request, file: UploadFile = File(...), password: Optional[str] = Form(default=None)):
    try:
        require_credential(password, request.app.state.settings.admin_password)
        if not is_supported_workbook(file.filename):
            raise ParseError(UNSUPPORTED_FILE_MESSAGE)
        dataset = require_records(load_letter_workbook(file.file, filename=file.filename))
        _store(request).save(dataset_to_payload(dataset), password)
        return _json(
            {
                "success": True,
                "records": len(dataset.records),
                "years": list(dataset.years),
                "latest_year": dataset.latest_year,
                "message": f"Successfully processed {len(dataset.records)} records from {len(dataset.years)} years",
            }
        )
    except Exception as exc:
        return _error(exc, "upload")


@router.get("/meta/years")
def meta_years(request: Request):
    try:
        return _json({"years": list(_active_dataset(request).years)})
    except Exception as exc:
        return _error(exc, "meta_years")


@router.get("/meta/regions")
def meta_regions(request: Request):
    try:
        return _json({"regions": list(_active_dataset(request).regions)})
    except Exception as exc:
        return _error(exc, "meta_regions")


@router.get("/meta/countries")
def meta_countries(request: Request, regions: List[str] = Query(default=[])):
    try:
        dataset = _active_dataset(request)
        return _json({"countries": countries_for_regions(dataset, regions)})
    except Exception as exc:
        return _error(exc, "meta_countries")


@router.get("/summary")
def summary(request: Request):
    try:
        dataset = _active_dataset(request)
        return _json(
            {
                "records": len(dataset.records),
                "last_updated": dataset.last_updated.isoformat(),
                "years": compute_year_summaries(dataset),
            }
        )
    except Exception as exc:
        return _error(exc, "summary")


@router.post("/dashboard")
def dashboard(filters: ScopeFiltersModel, request: Request):
    try:
        dataset = _active_dataset(request)
        f = normalize_filters(filters.model_dump(), available_years=dataset.years)
        return _json(compute_dashboard(f, dataset))
    except Exception as exc:
        return _error(exc, "dashboard")


def create_app(settings: Optional[Settings] = None, store: Optional[DatasetStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    app = FastAPI(title="LetterEase Dashboard API", version="0.1.0")
    app.state.settings = settings
    app.state.store = store or build_store(settings)
    app.state.dataset_lock = threading.Lock()
    app.state.dataset_cache = None
    if not settings.writes_enabled:
        logger.warning("LETTEREASE_ADMIN_PASSWORD is not set; uploads and deletes will be rejected")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()
