"""
Main FastAPI Application - IDX Stock Signal

Signal engine for Indonesian stocks: swing and intraday analysis,
head-to-head comparison and batch scanning.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

import config
from routes import analysis_router

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Create FastAPI app
app = FastAPI(
    title=f"{config.PAGE_TITLE} API",
    description="Technical signal engine for IDX stocks with bandarmology flow tracking",
    version="1.0.0"
)

# CORS middleware for the dashboard frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip compression for large JSON responses (chart series)
app.add_middleware(GZipMiddleware, minimum_size=1000)


@app.on_event("startup")
async def startup_event():
    logger = logging.getLogger("uvicorn")
    logger.info(
        f"Signal engine ready (tz={config.MARKET_TIMEZONE}, "
        f"scan workers={config.SCAN_CONCURRENCY}, watchlist={len(config.DEFAULT_TICKERS)} tickers)"
    )


@app.get("/")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "online",
        "message": f"{config.PAGE_TITLE} API is running",
        "version": "1.0.0",
        "features": {
            "analyze": "Daily swing signal, trend, candle patterns and bandar flow",
            "intraday": "VWAP / opening range bias with ATR trading plan",
            "compare": "Head-to-head valuation, momentum, profitability and flow",
            "scan": "Concurrent batch scan of the watchlist",
            "chart": "Price with VWAP overlay",
            "market_status": "IDX session status"
        }
    }


# Register all routers
app.include_router(analysis_router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=config.API_HOST, port=config.API_PORT, reload=True)
