"""Drinksync API: receives S3 object-created notifications over an SNS HTTP(S) subscription."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from drinksync.api.info import app_info
from drinksync.api.notifications import app_notifications
from drinksync.connections import close_connections, start_connections


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.info("Starting AWS clients...")
    await start_connections()

    yield
    await close_connections()


app = FastAPI(
    title="drinksync",
    description=__doc__ if __doc__ else "",
    openapi_tags=[
        dict(name="notifications", description="Endpoint for SNS subscription messages"),
        dict(name="informational", description="Endpoints for server configuration"),
    ],
    lifespan=lifespan,
)
app.include_router(app_info)
app.include_router(app_notifications)


@app.exception_handler(ValueError)
async def value_error_exception_handler(request: Request, exc: ValueError):
    return JSONResponse(
        status_code=400,
        content={"message": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc) -> JSONResponse:
    return JSONResponse(
        status_code=422, content={"message": "There was an issue with the data you sent.", "fields_invalid": exc.errors()}
    )
