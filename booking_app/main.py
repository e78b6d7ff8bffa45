import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from booking_app.api.v1.appointments import router as appointments_router
from booking_app.api.v1.settings import router as settings_router
from booking_app.api.webhooks import router as webhooks_router
from booking_app.core.config import settings
from booking_app.infrastructure.scheduler.expiry_sweeper import ExpirySweeper
from booking_app.wiring.dependencies import get_expire_unpaid_use_case

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("appointment_id", "day_key", "status", "event", "service", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    sweeper = None
    if settings.EXPIRY_SWEEP_ENABLED:
        sweeper = ExpirySweeper(get_expire_unpaid_use_case(), settings.EXPIRY_SWEEP_INTERVAL_SECONDS)
        await sweeper.start()
        logger.info("Expiry sweeper started")
    yield
    if sweeper is not None:
        await sweeper.stop()
        logger.info("Expiry sweeper stopped")


app = FastAPI(title="Appointment Booking", version="1.0.0", lifespan=lifespan)

app.include_router(appointments_router, prefix="/api/v1", tags=["appointments"])
app.include_router(settings_router, prefix="/api/v1", tags=["settings"])
app.include_router(webhooks_router, prefix="/api/v1", tags=["webhooks"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
