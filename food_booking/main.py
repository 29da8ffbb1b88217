from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from food_booking.core.config import settings
from food_booking.core.errors import BookingError, BookingValidationError
from food_booking.api import bookings, rpc
from food_booking.core.logger import setup_logging, logger
from food_booking.services.booking_store import BookingStore
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({app.state.booking_store.count()} bookings loaded)")
    yield
    # Shutdown
    logger.info("🛑 Shutting down backend")

def create_app(store: Optional[BookingStore] = None) -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="0.1.0",
        lifespan=lifespan
    )
    app.state.booking_store = store if store is not None else BookingStore.from_settings(settings)

    @app.exception_handler(BookingError)
    async def booking_error_handler(request: Request, exc: BookingError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Bad bodies are booking validation failures (400); bad query params stay 422
        first = exc.errors()[0] if exc.errors() else {}
        loc = list(first.get("loc", ()))
        names = [part for part in loc[1:] if isinstance(part, str)]
        field = names[-1] if names else None
        error = BookingValidationError(f"Invalid input: {first.get('msg', 'malformed request')}", field=field)
        status_code = 400 if loc[:1] == ["body"] else 422
        return JSONResponse(status_code=status_code, content=error.to_dict())

    # Global Exception Handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.opt(exception=exc).error(f"🔥 UNHANDLED ERROR: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content={"kind": "internal", "message": "Internal Server Error", "field": None}
        )

    app.include_router(bookings.router, prefix=settings.API_PREFIX, tags=["Bookings"])
    app.include_router(rpc.router, prefix=settings.API_PREFIX, tags=["RPC"])

    @app.get("/")
    async def health_check():
        return {'status': 'active', 'time': datetime.now().isoformat()}

    @app.get("/health")
    async def health_check_std():
        return {"status": "ok", "environment": settings.ENVIRONMENT, "timestamp": datetime.now().isoformat()}

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("food_booking.main:app", host="0.0.0.0", port=settings.PORT, reload=True)
