from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from stream_monitor.core.config import VERSION, get_settings
from stream_monitor.core.events import EventManager
from stream_monitor.utils.logging_config import setup_logging

logger = setup_logging("stream_monitor.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start the monitoring scheduler with the app and stop it on shutdown."""
    event_manager = getattr(app.state, "event_manager", None) or EventManager()
    app.state.event_manager = event_manager

    await event_manager.startup(start_scheduler=getattr(app.state, "start_scheduler", True))
    logger.info("Monitoring service started")

    yield  # Application runs here

    try:
        await event_manager.shutdown()
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}")


def create_app(event_manager: EventManager = None, start_scheduler: bool = True) -> FastAPI:
    app = FastAPI(
        title="Stream Monitor",
        description="Checks that audio streams carry live audio",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.event_manager = event_manager
    app.state.start_scheduler = start_scheduler

    @app.get("/health")
    async def health_check(request: Request):
        """Liveness of the service and its scheduler."""
        scheduler = request.app.state.event_manager.scheduler
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": VERSION,
            "delivery_mode": request.app.state.event_manager.settings.DELIVERY_MODE,
            "scheduler_running": bool(scheduler and scheduler.is_running),
            "round_in_progress": bool(scheduler and scheduler.round_in_progress),
        }

    @app.get("/api/rounds/latest")
    async def latest_round(request: Request):
        """Summary of the most recent completed round."""
        scheduler = request.app.state.event_manager.scheduler
        if scheduler is None or scheduler.last_summary is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No round has completed yet")
        return scheduler.last_summary.model_dump(mode="json")

    @app.post("/api/rounds", status_code=status.HTTP_202_ACCEPTED)
    async def trigger_round(request: Request):
        """Start a round now."""
        scheduler = request.app.state.event_manager.scheduler
        if scheduler is None:
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Monitoring engine not started")
        if not scheduler.trigger():
            return JSONResponse(
                status_code=status.HTTP_409_CONFLICT,
                content={"detail": "A round is already in progress"},
            )
        return {"detail": "Round started"}

    return app


app = create_app()


def main():
    settings = get_settings()

    # Configure uvicorn logging
    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["access"]["fmt"] = settings.LOG_FORMAT

    uvicorn.run(
        app,
        host=settings.HOST,
        port=settings.API_PORT,
        log_config=log_config,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True,
        workers=1,  # One scheduler per deployment
    )


if __name__ == "__main__":
    main()
