"""Export download routes."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from tweetcurator.storage.export import export_rows, to_csv
from tweetcurator.web.deps import filters_from_request, get_config, get_db

router = APIRouter()


@router.get("/export/json")
async def export_json(request: Request):
    """Every matching tweet as a JSON array."""
    filters = filters_from_request(request)
    with get_db(get_config(request)) as db:
        return export_rows(db, filters)


@router.get("/export/csv")
async def export_csv(request: Request):
    filters = filters_from_request(request)
    with get_db(get_config(request)) as db:
        rows = export_rows(db, filters)
    return Response(
        content=to_csv(rows),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="tweets_export.csv"'},
    )
