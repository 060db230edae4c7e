"""
Backend Routes Module

This module exports the FastAPI routers for the IDX Stock Signal API:

- analysis_router: swing / intraday analysis, comparison, batch scan,
  chart data and market status endpoints

Usage:
    from routes import analysis_router

    app.include_router(analysis_router)
"""
from .analysis import router as analysis_router

__all__ = [
    "analysis_router",
]
