import json
from typing import Any, List, Optional

from fastapi import Body, Depends, FastAPI, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from viz_playground.config import settings
from viz_playground.utils.exceptions import AppException
from viz_playground.utils.logger import get_logger

# Import core logic
from viz_playground.core.assistant import greeting, respond
from viz_playground.core.computed_fields import add_computed_fields
from viz_playground.core.export import insights_to_csv, rows_to_csv
from viz_playground.core.ingestion import ingest_rows, ingest_text
from viz_playground.core.insights import generate_insights
from viz_playground.core.query import apply_filters, apply_group_spec
from viz_playground.core.schema import analyze
from viz_playground.core.session import DatasetSessions, InMemoryStore
from viz_playground.core.visualization import generate_chart_json, kpi_summary, prepare_chart_data
from viz_playground.models import (
    ChartConfig,
    ChartType,
    ComputedField,
    DatasetContext,
    FilterRule,
    GroupAggregationSpec,
)

logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs"
)

# --- Session Store (override get_sessions to swap the backend) ---
_SESSIONS = DatasetSessions(InMemoryStore())


def get_sessions() -> DatasetSessions:
    return _SESSIONS


class ChatMessage(BaseModel):
    message: str


@app.exception_handler(AppException)
async def app_exception_handler(request: Request, exc: AppException):
    logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def _dataset_summary(context: DatasetContext) -> dict:
    return {
        "dataset_id": context.dataset_id,
        "filename": context.filename,
        "rows": len(context.rows),
        "columns": [c.model_dump(mode="json") for c in context.columns],
    }


def _transformed(rows: List[dict]) -> dict:
    """Response body for a derived dataset: rows plus their fresh schema."""
    return {
        "rows": rows,
        "count": len(rows),
        "columns": [c.model_dump(mode="json") for c in analyze(rows)],
    }


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "online", "message": f"{settings.APP_NAME} API is running"}


@app.post("/datasets/upload")
async def upload_file(file: UploadFile = File(...), sessions: DatasetSessions = Depends(get_sessions)):
    """
    Uploads a CSV or JSON file and infers its schema.
    """
    logger.info(f"Received file upload: {file.filename}")
    content = await file.read()
    context = ingest_text(content, file.filename)
    sessions.save(context)
    return _dataset_summary(context)


@app.post("/datasets")
def import_records(
    records: Any = Body(...),
    filename: str = Query("pasted.json"),
    sessions: DatasetSessions = Depends(get_sessions),
):
    """Imports pasted JSON records (array of objects)."""
    context = ingest_rows(records, filename)
    sessions.save(context)
    return _dataset_summary(context)


@app.get("/datasets/{dataset_id}/schema")
def get_schema(dataset_id: str, sessions: DatasetSessions = Depends(get_sessions)):
    context = sessions.load(dataset_id)
    return [c.model_dump(mode="json") for c in context.columns]


@app.get("/datasets/{dataset_id}/preview")
def preview(
    dataset_id: str,
    limit: Optional[int] = Query(None, ge=1),
    sessions: DatasetSessions = Depends(get_sessions),
):
    context = sessions.load(dataset_id)
    limit = limit or settings.PREVIEW_ROWS
    return {"rows": context.rows[:limit], "total": len(context.rows)}


@app.get("/datasets/{dataset_id}/insights")
def get_insights(dataset_id: str, sessions: DatasetSessions = Depends(get_sessions)):
    """Correlation, outlier and dominant-category findings, highest confidence first."""
    context = sessions.load(dataset_id)
    insights = generate_insights(context.rows, context.columns)
    return [i.model_dump(mode="json") for i in insights]


@app.post("/datasets/{dataset_id}/filter")
def filter_rows(dataset_id: str, rules: List[FilterRule], sessions: DatasetSessions = Depends(get_sessions)):
    context = sessions.load(dataset_id)
    return _transformed(apply_filters(context.rows, rules))


@app.post("/datasets/{dataset_id}/group")
def group_rows(dataset_id: str, spec: GroupAggregationSpec, sessions: DatasetSessions = Depends(get_sessions)):
    context = sessions.load(dataset_id)
    return _transformed(apply_group_spec(context.rows, spec))


@app.post("/datasets/{dataset_id}/computed")
def computed_rows(dataset_id: str, fields: List[ComputedField], sessions: DatasetSessions = Depends(get_sessions)):
    context = sessions.load(dataset_id)
    return _transformed(add_computed_fields(context.rows, fields))


@app.post("/datasets/{dataset_id}/chart")
def build_chart(dataset_id: str, config: ChartConfig, sessions: DatasetSessions = Depends(get_sessions)):
    """
    Chart data binding for a chart card, with the Plotly figure when the
    chart type has one and KPI tiles for kpi cards.
    """
    context = sessions.load(dataset_id)

    kpi = None
    if config.type == ChartType.KPI and config.y_axis:
        kpi = kpi_summary(context.rows, config.y_axis)

    if config.type == ChartType.TABLE:
        data = context.rows[:settings.PREVIEW_ROWS]
        figure = None
    else:
        data = prepare_chart_data(context.rows, config)
        figure = generate_chart_json(context.rows, config, data)

    return {
        "data": data,
        "figure": json.loads(figure) if figure else None,
        "kpi": kpi,
    }


@app.get("/datasets/{dataset_id}/chat")
def chat_greeting(dataset_id: str, sessions: DatasetSessions = Depends(get_sessions)):
    context = sessions.load(dataset_id)
    insights = generate_insights(context.rows, context.columns)
    return {"reply": greeting(insights, context.rows, context.columns)}


@app.post("/datasets/{dataset_id}/chat")
def chat(dataset_id: str, payload: ChatMessage, sessions: DatasetSessions = Depends(get_sessions)):
    context = sessions.load(dataset_id)
    insights = generate_insights(context.rows, context.columns)
    return {"reply": respond(payload.message, insights, context.rows, context.columns)}


@app.get("/datasets/{dataset_id}/export.csv")
def export_csv(dataset_id: str, sessions: DatasetSessions = Depends(get_sessions)):
    context = sessions.load(dataset_id)
    csv_text = rows_to_csv(context.rows, [c.name for c in context.columns])
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="data-export.csv"'},
    )


@app.get("/datasets/{dataset_id}/insights.csv")
def export_insights_csv(dataset_id: str, sessions: DatasetSessions = Depends(get_sessions)):
    context = sessions.load(dataset_id)
    csv_text = insights_to_csv(generate_insights(context.rows, context.columns))
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="insights-export.csv"'},
    )


@app.delete("/datasets/{dataset_id}")
def delete_dataset(dataset_id: str, sessions: DatasetSessions = Depends(get_sessions)):
    sessions.discard(dataset_id)
    return {"deleted": dataset_id}
