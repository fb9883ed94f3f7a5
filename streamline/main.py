from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from streamline.core.config import Settings, settings as default_settings
from streamline.core.errors import ConfigurationError, SubmissionError
from streamline.core.logger import get_logger
from streamline.core.middleware import log_requests
from streamline.routes.form_router import form_router
from streamline.routes.site_files import SiteFiles
from streamline.services.dispatch_service import NotificationDispatcher
from streamline.services.mail_service import Mailer, build_mailer

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # A failed check is only reported: requests keep being accepted and
    # fail one by one at send time if the problem persists.
    try:
        await app.state.dispatcher.mailer.verify()
        app.state.mail_ready = True
        logger.info("MAIL READY ✅")
    except ConfigurationError as e:
        logger.error(f"MAIL VERIFY ERROR: {e}")

    logger.info(" Application startup complete")

    yield

    logger.info(" Application shutdown initiated")


async def submission_error_handler(request: Request, exc: SubmissionError):
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "message": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}", exc_info=exc)
    return JSONResponse(status_code=500, content={"ok": False, "message": "Internal server error."})


def create_app(settings: Optional[Settings] = None, mailer: Optional[Mailer] = None) -> FastAPI:
    settings = settings or default_settings
    mailer = mailer or build_mailer(settings)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.mail_ready = False
    app.state.dispatcher = NotificationDispatcher(
        mailer=mailer,
        sender_address=settings.SMTP_USER,
        sender_name=settings.MAIL_FROM_NAME,
        recipient=settings.TO_EMAIL,
        send_timeout=settings.MAIL_SEND_TIMEOUT,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    app.add_exception_handler(SubmissionError, submission_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # API routes first: the site mount at "/" takes every other path
    app.include_router(form_router)

    public_dir = Path(settings.PUBLIC_DIR)
    if not public_dir.is_dir():
        logger.warning(f"Public folder {public_dir.resolve()} not found, site pages will 404")
    app.mount("/", SiteFiles(directory=public_dir, html=True, check_dir=False), name="site")
    return app


app = create_app()


def run():
    logger.info(f"Server running on http://localhost:{default_settings.PORT}")
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)


if __name__ == "__main__":
    run()
