from __future__ import annotations

from dataclasses import asdict
import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from fastapi.encoders import jsonable_encoder

from api.schemas import DashboardOptionsModel, DashboardRequest, FilterSelectionModel, TeamModel
from gong_core.data import filter_options, load_dashboard_data
from gong_core.filters import DashboardOptions, FilterSelection, normalize_filters, normalize_options
from gong_core.metrics_dashboard import (
    compute_dashboard,
    compute_debug,
    compute_metric,
    compute_team_average_table,
    export_filtered_records,
)
from gong_core.settings import configure_logging, get_settings
from gong_core.teams import TEAMS


settings = get_settings()
configure_logging(settings)

app = FastAPI(title="Gong Call Metrics API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _filters_from_model(model: FilterSelectionModel) -> FilterSelection:
    return normalize_filters(model.model_dump())


def _options_from_model(model: DashboardOptionsModel) -> DashboardOptions:
    return normalize_options(model.model_dump())


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
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
            },
        )
    )


def _error(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


def _meta_values(field: str):
    data_ctx = load_dashboard_data()
    options = filter_options(data_ctx["records"])
    return _json({"values": options[field], "load_error": data_ctx.get("error")})


@app.get("/meta/reps")
def meta_reps():
    try:
        return _meta_values("reps")
    except Exception as exc:
        logger.exception("meta_reps failed")
        return _error(exc)


@app.get("/meta/metrics")
def meta_metrics():
    try:
        return _meta_values("metrics")
    except Exception as exc:
        logger.exception("meta_metrics failed")
        return _error(exc)


@app.get("/meta/months")
def meta_months():
    try:
        return _meta_values("months")
    except Exception as exc:
        logger.exception("meta_months failed")
        return _error(exc)


@app.get("/meta/quarters")
def meta_quarters():
    try:
        return _meta_values("quarters")
    except Exception as exc:
        logger.exception("meta_quarters failed")
        return _error(exc)


@app.get("/meta/teams")
def meta_teams():
    teams = [TeamModel(**{**asdict(team), "members": list(team.members)}).model_dump() for team in TEAMS.values()]
    return _json({"teams": teams})


@app.post("/dashboard")
def dashboard(request: DashboardRequest):
    try:
        data_ctx = load_dashboard_data()
        selection = _filters_from_model(request.filters)
        options = _options_from_model(request.options)
        return _json(compute_dashboard(selection, options, data_ctx, include_charts=request.include_charts))
    except Exception as exc:
        logger.exception("dashboard failed")
        return _error(exc)


@app.post("/metric")
def metric_detail(request: DashboardRequest, metric: str = Query(...)):
    try:
        data_ctx = load_dashboard_data()
        selection = _filters_from_model(request.filters)
        options = _options_from_model(request.options)
        payload = compute_metric(metric, selection, options, data_ctx, include_chart=request.include_charts)
        payload["load_error"] = data_ctx.get("error")
        return _json(payload)
    except Exception as exc:
        logger.exception("metric failed")
        return _error(exc)


@app.post("/team-averages")
def team_averages(filters: FilterSelectionModel, metric: str = Query(...)):
    try:
        data_ctx = load_dashboard_data()
        return _json(compute_team_average_table(metric, _filters_from_model(filters), data_ctx))
    except Exception as exc:
        logger.exception("team_averages failed")
        return _error(exc)


@app.post("/debug")
def debug():
    try:
        return _json(compute_debug(load_dashboard_data()))
    except Exception as exc:
        logger.exception("debug failed")
        return _error(exc)


@app.post("/export/records")
def export_records(filters: FilterSelectionModel):
    data_ctx = load_dashboard_data()
    export_df = export_filtered_records(_filters_from_model(filters), data_ctx)
    export_df = export_df.rename(columns={"rep_name": "User Name", "month": "Month", "metric": "Metric", "value": "Value"})
    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": "attachment; filename=records.csv"})
