import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import get_settings
from .core.db import AsyncSessionLocal, Base, engine
from .core.responses import HTTP_STATUS_BY_KIND, error_response
from .dashboard import router as dashboard_router
from .errors import BookingError, ErrorKind
from .public_booking import router as public_booking_router
from .seed import seed_initial_data


settings = get_settings()
logger = logging.getLogger(__name__)

app = FastAPI(title="Slotbook")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(public_booking_router)
app.include_router(dashboard_router)


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    return JSONResponse(
        status_code=HTTP_STATUS_BY_KIND[exc.kind],
        content=error_response(exc.kind.value, exc.message, exc.details),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=HTTP_STATUS_BY_KIND[ErrorKind.VALIDATION_ERROR],
        content=error_response(
            ErrorKind.VALIDATION_ERROR.value,
            "Invalid request",
            {"errors": jsonable_encoder(exc.errors())},
        ),
    )


@app.on_event("startup")
async def on_startup():
    logging.getLogger().setLevel(settings.log_level.upper())
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    if settings.seed_demo_data:
        async with AsyncSessionLocal() as session:
            await seed_initial_data(session)
        logger.info("Demo data seeded")


@app.get("/health")
async def healthcheck():
    return {"ok": True}
