import logging
import time
from fastapi import Request
from fastapi.responses import Response

access_logger = logging.getLogger("app.access")

SECURITY_HEADERS = {
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'self'; object-src 'none'",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
}


async def security_headers_middleware(request: Request, call_next):
    response: Response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


async def access_log_middleware(request: Request, call_next):
    start_time = time.perf_counter()
    response: Response = None
    try:
        response = await call_next(request)
        return response
    finally:
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        status_code = response.status_code if response else 500
        access_logger.info(f"{request.method} {request.url.path} {status_code} - {elapsed_ms:.3f} ms")
