from fastapi import Request

from briefgate.app.core.config import settings
from briefgate.app.core.logging import get_log_context, get_logger
from briefgate.app.core.security import check_origin, check_token
from briefgate.app.exceptions import AdmissionRejected, TokenRejected

logger = get_logger(__name__)


def require_first_party(request: Request) -> None:
    """FastAPI dependency running the admission gate.

    Origin/Referer first, then the shared-secret token. Any failure ends the
    request here, before the rate limiter or upstream call.

    Raises:
        AdmissionRejected: 403 if Origin or Referer is foreign
        TokenRejected: 401 if the token is missing, wrong, or unconfigured
    """
    try:
        check_origin(request.headers, settings.app_url)
        check_token(
            request.headers,
            settings.api_shared_secret,
            header_name=settings.app_token_header,
        )
    except (AdmissionRejected, TokenRejected) as exc:
        logger.warning(
            "Request rejected by admission gate",
            extra=get_log_context(
                request_id=getattr(request.state, "request_id", None),
                reason=exc.reason,
                path=request.url.path,
            ),
        )
        raise
