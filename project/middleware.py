import logging
import uuid

logger = logging.getLogger(__name__)


class RequestIDMiddleware:
    """Attach a per-request UUID for traceability.

    - Accepts inbound X-Request-ID if provided, else generates a new UUID4.
    - Exposes the ID via request.request_id, request.META['REQUEST_ID'] and
      the X-Request-ID response header so marketplace log lines can be
      correlated with the call that produced them.
    """

    header = "HTTP_X_REQUEST_ID"

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request_id = (request.META.get(self.header) or "").strip()[:64] or str(uuid.uuid4())
        request.request_id = request_id
        request.META["REQUEST_ID"] = request_id
        logger.debug("request %s %s", request.method, request.path, extra={"request_id": request_id})
        response = self.get_response(request)
        response["X-Request-ID"] = request_id
        return response
