"""Route registration for the TweetCurator API."""

from __future__ import annotations

from fastapi import FastAPI


def register_routes(app: FastAPI):
    """Include all route modules under /api."""
    from tweetcurator.web.routes import admin, export, semantic, stats, swipe, tags, tweets

    app.include_router(tweets.router, prefix="/api")
    app.include_router(tags.router, prefix="/api")
    app.include_router(swipe.router, prefix="/api")
    app.include_router(stats.router, prefix="/api")
    app.include_router(export.router, prefix="/api")
    app.include_router(admin.router, prefix="/api")
    app.include_router(semantic.router, prefix="/api")
