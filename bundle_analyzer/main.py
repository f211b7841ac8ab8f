"""
Bundle Analyzer — FastAPI live report server.
Serves the latest chart data and pushes a fresh copy to every connected
viewer each time new stats are analyzed.
"""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bundle_analyzer import __version__
from bundle_analyzer.config import ServerSettings
from bundle_analyzer.routers import report
from bundle_analyzer.state import ReportStateChannel


def create_app(channel: ReportStateChannel, settings: Optional[ServerSettings] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        channel.close()

    app = FastAPI(title="Bundle Analyzer", version=__version__, lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.channel  = channel
    app.state.settings = settings or ServerSettings()

    app.include_router(report.router)
    return app
