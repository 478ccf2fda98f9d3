"""Maintenance routes: heuristic and LLM re-tagging, database info."""

from __future__ import annotations

import logging
import sqlite3
import threading
import time
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from pydantic import BaseModel

from tweetcurator.config import LLM_TAG_BATCH_SIZE, LLM_TAG_DELAY_SECONDS, CuratorConfig
from tweetcurator.llm.client import LLMError
from tweetcurator.tagging.heuristics import auto_tag
from tweetcurator.tagging.llm import llm_tag
from tweetcurator.web.deps import get_config, get_db, get_llm_client, get_repo

logger = logging.getLogger(__name__)

router = APIRouter()


class LLMTagJob:
    """Progress of the single background LLM tagging run."""

    def __init__(self):
        self._lock = threading.Lock()
        self.running = False
        self.progress = ""
        self.started_at: float | None = None
        self.summary: dict | None = None
        self.error: str | None = None

    def start(self) -> bool:
        """Claim the job; False when a run is already in progress."""
        with self._lock:
            if self.running:
                return False
            self.running = True
            self.progress = "Starting..."
            self.started_at = time.time()
            self.summary = None
            self.error = None
            return True

    def update(self, index: int, total: int):
        with self._lock:
            self.progress = f"Batch {index}/{total}"

    def finish(self, summary: dict | None = None, error: str | None = None):
        with self._lock:
            self.running = False
            self.summary = summary
            self.error = error
            minutes = self.elapsed_minutes()
            if error:
                self.progress = f"Failed after {minutes} minutes"
            else:
                self.progress = f"Completed in {minutes} minutes"

    def elapsed_minutes(self) -> float:
        if self.started_at is None:
            return 0.0
        return round((time.time() - self.started_at) / 60, 1)

    def status(self) -> dict:
        with self._lock:
            return {
                "running": self.running,
                "progress": self.progress,
                "started_at": self.started_at,
                "elapsedMinutes": self.elapsed_minutes(),
                "summary": self.summary,
                "error": self.error,
            }


class LLMTagRequest(BaseModel):
    limit: Optional[int] = None
    batch_size: Optional[int] = None
    clear: bool = False


def run_llm_tag_job(
    job: LLMTagJob, config: CuratorConfig, llm_client, options: LLMTagRequest
):
    """Tag in the background with a connection owned by this thread."""
    try:
        with get_db(config) as db:
            summary = llm_tag(
                db,
                llm_client,
                batch_size=options.batch_size or LLM_TAG_BATCH_SIZE,
                delay=LLM_TAG_DELAY_SECONDS,
                limit=options.limit,
                clear_existing=options.clear,
                progress_callback=job.update,
            )
    except (sqlite3.Error, LLMError) as e:
        logger.error(f"Background LLM tagging failed: {e}")
        job.finish(error=str(e))
        return
    job.finish(summary=summary)
    logger.info(f"Background LLM tagging finished: {job.progress}")


@router.post("/admin/auto-tag")
async def run_auto_tag(request: Request):
    """Replace all `ai` tag links with fresh heuristic ones."""
    with get_db(get_config(request)) as db:
        links = auto_tag(db)
    return {"success": True, "tagged": links}


@router.post("/admin/llm-tag")
async def start_llm_tag(
    request: Request,
    background_tasks: BackgroundTasks,
    options: Optional[LLMTagRequest] = None,
):
    """Start LLM tagging in the background; poll /admin/llm-tag-status."""
    llm_client = get_llm_client(request)
    if llm_client is None:
        raise HTTPException(status_code=503, detail="LLM tagging is not configured")

    job: LLMTagJob = request.app.state.llm_tag_job
    if not job.start():
        return {
            "success": False,
            "message": "LLM tagging already in progress",
            "status": job.status(),
        }

    background_tasks.add_task(
        run_llm_tag_job, job, get_config(request), llm_client, options or LLMTagRequest()
    )
    return {"success": True, "message": "LLM tagging started in background"}


@router.get("/admin/llm-tag-status")
async def llm_tag_status(request: Request):
    return request.app.state.llm_tag_job.status()


@router.get("/admin/db-info")
async def db_info(request: Request):
    config = get_config(request)
    with get_db(config) as db:
        count = get_repo(db).get_tweet_count()
    return {"path": str(config.db_path), "tweets": count}
