import time

from fastapi import Request

from streamline.core.logger import get_logger

logger = get_logger("request_logger")


async def log_requests(request: Request, call_next):
    start_time = time.perf_counter()
    logger.info(f"REQ: {request.method} {request.url.path}")
    response = await call_next(request)
    duration = time.perf_counter() - start_time
    logger.info(
        f"Completed {request.method} {request.url.path} "
        f"status={response.status_code} in {duration:.3f}s"
    )
    return response
