import logging
import sys
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pymongo.database import Database
from pymongo.errors import PyMongoError

import auth
import bookkeeping
import schemas
import support
from context import AppContext, get_ctx
from crud import crud_router, default_resources
from errors import AssetaError, StorageError
from settings import Settings

logger = logging.getLogger(__name__)

SCHEMA_MODELS = {
    "vendors": schemas.Vendor,
    "products": schemas.Product,
    "assets": schemas.Asset,
    "users": schemas.User,
    "support": schemas.SupportTicket,
    "notifications": schemas.Notification,
    "recycle_bin": schemas.RecycleBinEntry,
    "activity_logs": schemas.ActivityLog,
}


def configure_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


# ---------------------- Error handlers ----------------------
async def asseta_error_handler(request: Request, exc: AssetaError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"detail": "Validation failed", "code": "VALIDATION_ERROR", "errors": errors},
    )


async def storage_error_handler(request: Request, exc: PyMongoError):
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content=StorageError(str(exc)).to_dict())


# ---------------------- App ----------------------
def create_app(settings: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    ctx = AppContext(settings, database) if database is not None else AppContext.connect(settings)

    app = FastAPI(title="Asseta API")
    app.state.ctx = ctx

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(AssetaError, asseta_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(PyMongoError, storage_error_handler)

    for resource in default_resources():
        ctx.register(resource)
        app.include_router(crud_router(resource))
    ctx.register(support.SUPPORT)
    app.include_router(support.router)
    app.include_router(bookkeeping.router)
    app.include_router(auth.router)

    @app.get("/api")
    def read_root():
        return {"message": "Asseta API running"}

    @app.get("/test")
    def test_database(ctx: AppContext = Depends(get_ctx)):
        """Report whether the database is reachable"""
        response = {
            "backend": "Running",
            "database": "Not Available",
            "database_name": ctx.settings.database_name,
            "connection_status": "Not Connected",
            "collections": [],
        }
        try:
            response["collections"] = ctx.db.list_collection_names()[:10]
            response["connection_status"] = "Connected"
            response["database"] = "Connected & Working"
        except PyMongoError as e:
            logger.warning("Database check failed: %s", e)
            response["database"] = f"Connected but Error: {str(e)[:80]}"
        return response

    @app.get("/schema")
    def schema_info():
        return {
            "collections": [
                {"name": name, "fields": list(model.model_fields)}
                for name, model in SCHEMA_MODELS.items()
            ]
        }

    ctx.ensure_indexes()

    # mounted last so the API routes above take precedence
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.static_dir), html=True), name="public")
    else:
        logger.warning("Static directory %s not found, client app not served", settings.static_dir)

    return app


if __name__ == "__main__":
    import uvicorn
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
