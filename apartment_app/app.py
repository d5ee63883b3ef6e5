import logging

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from core.catch_error_middleware import ErrorHandlerMiddleware
from core.errors import ValidationFailed
from core.exception_handler import ValidationErrorHandler
from core.lifespan import lifespan
from core.settings import settings
from routes.admin_routes import router as admin_router
from routes.apartment_routes import router as apartment_router
from routes.auth_routes import router as auth_router
from routes.notification_routes import router as notification_router
from routes.payment_routes import router as payment_router
from routes.user_routes import router as user_router

logging.basicConfig(level=settings.LOG_LEVEL)

app = FastAPI(
    lifespan=lifespan,
    title=settings.PROJECT_NAME,
    version="1.0.0",
)

app.include_router(auth_router)
app.include_router(user_router)
app.include_router(apartment_router)
app.include_router(payment_router)
app.include_router(notification_router)
app.include_router(admin_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["System"])
async def health_check():
    return {"status": "ok"}


app.add_exception_handler(
    RequestValidationError,
    ValidationErrorHandler(),
)
app.add_exception_handler(
    ValidationFailed,
    ValidationErrorHandler(),
)

app.add_middleware(ErrorHandlerMiddleware)


if __name__ == "__main__":
    uvicorn.run(app, host="127.0.0.1", port=8001)
