from __future__ import annotations

import logging
import math

from fastapi import FastAPI, File, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from sales_api.relay import RelayConfigError, RelayError, send_contact_message
from sales_api.schemas import ContactMessageModel, FilterSelectionModel, RecordsPayload
from sales_core.data import DataLoadError, DataSet, load_csv, load_dataset, load_sample
from sales_core.export import EXPORT_FILENAME, to_csv_text
from sales_core.filters import FilterSelection, normalize_filters
from sales_core.metrics_overview import compute_overview, prepare_context


app = FastAPI(title="Sales Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Current data set; replaced wholesale on every load.
app.state.dataset = load_sample()


def _filters_from_model(model: FilterSelectionModel) -> FilterSelection:
    return normalize_filters(model.model_dump())


def _set_dataset(dataset: DataSet) -> DataSet:
    app.state.dataset = dataset
    return dataset


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with Decimal and non-finite float values made safe."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(data, custom_encoder={float: _safe_float}),
    )


def _error(exc: Exception, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _loaded(dataset: DataSet) -> JSONResponse:
    return _json({"source": dataset.source, "rows": len(dataset), "categories": dataset.categories})


@app.post("/dataset/sample")
def dataset_sample():
    try:
        return _loaded(_set_dataset(load_sample()))
    except Exception as exc:
        logger.exception("dataset_sample failed")
        return _error(exc)


@app.post("/dataset/upload")
async def dataset_upload(file: UploadFile = File(...)):
    content = await file.read()
    try:
        dataset = load_csv(content)
    except DataLoadError as exc:
        logger.warning("CSV parse error for %s: %s", file.filename, exc)
        return JSONResponse(status_code=400, content={"error": f"CSV parse error: {exc}", "type": type(exc).__name__})
    except Exception as exc:
        logger.exception("dataset_upload failed")
        return _error(exc)
    return _loaded(_set_dataset(dataset))


@app.post("/dataset/records")
def dataset_records(payload: RecordsPayload):
    try:
        return _loaded(_set_dataset(load_dataset(payload.records, source="records")))
    except Exception as exc:
        logger.exception("dataset_records failed")
        return _error(exc)


@app.get("/meta/categories")
def meta_categories():
    try:
        dataset: DataSet = app.state.dataset
        return _json({"values": dataset.categories})
    except Exception as exc:
        logger.exception("meta_categories failed")
        return _error(exc)


@app.post("/overview")
def overview(filters: FilterSelectionModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, app.state.dataset)
        return _json(compute_overview(f, ctx))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc)


@app.post("/export")
def export(filters: FilterSelectionModel):
    try:
        f = _filters_from_model(filters)
        ctx = prepare_context(f, app.state.dataset)
        csv_bytes = to_csv_text(ctx["filtered_rows"]).encode("utf-8")
    except Exception as exc:
        logger.exception("export failed")
        return _error(exc)
    return Response(
        content=csv_bytes,
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@app.post("/contact")
def contact(message: ContactMessageModel):
    try:
        data = send_contact_message(message.name, message.email, message.message)
    except RelayConfigError as exc:
        logger.error("contact relay not configured: %s", exc)
        return JSONResponse(status_code=503, content={"ok": False, "error": str(exc)})
    except RelayError:
        logger.exception("contact relay failed")
        return JSONResponse(status_code=502, content={"ok": False})
    return _json(data)
