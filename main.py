from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware import Middleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from tortoise.exceptions import BaseORMException

from api.routes.care_tasks import router as care_tasks_router
from api.routes.dashboard import router as dashboard_router
from api.routes.environment import router as environment_router
from api.routes.history import router as history_router
from api.routes.plants import router as plants_router
from api.routes.recommendations import router as recommendations_router
from api.routes.users import router as users_router
from core.config import settings
from core.exceptions import PlantCareException, ValidationError
from core.logger import app_logger, db_logger
from init_db import close_db, init_db

middleware = [
    Middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
]

app = FastAPI(
    title="Plant Care Backend",
    middleware=middleware
)


@app.on_event("startup")
async def startup():
    await init_db()
    app_logger.info("Database initialised")


@app.on_event("shutdown")
async def shutdown():
    await close_db()


@app.exception_handler(PlantCareException)
async def plant_care_exception_handler(request: Request, exc: PlantCareException):
    if exc.status_code >= 500:
        app_logger.error(f"{request.method} {request.url.path} failed: {exc.message} {exc.details}")
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    error = ValidationError("Invalid request", {"errors": errors})
    return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    if isinstance(exc, BaseORMException):
        db_logger.log_error(f"{request.method} {request.url.path}", exc)
    else:
        app_logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "Internal server error", "details": {}}},
    )


app.include_router(users_router)
app.include_router(plants_router)
app.include_router(care_tasks_router)
app.include_router(recommendations_router)
app.include_router(environment_router)
app.include_router(dashboard_router)
app.include_router(history_router)
