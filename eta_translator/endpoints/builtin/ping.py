from typing import Optional, Dict, Any

from flask import Request

from eta_translator.base.constants import REST_API_LOG_LEVEL
from eta_translator.core.decorators import EP
from eta_translator.endpoints.endpoint_i import EndpointI


class Ping(EndpointI):
    """
    Health‑check endpoint that returns a simple *pong* response.

    This endpoint is registered under the name ``ping`` and only supports
    the HTTP ``GET`` method.  It is used by monitoring tools and by the
    deploy automation smoke test to verify that the service is up.
    """

    def __init__(
        self,
        logger_file_name: Optional[str] = None,
        logger_level: Optional[str] = REST_API_LOG_LEVEL,
        ep_name: str = "ping",
    ):
        super().__init__(
            ep_name=ep_name,
            methods=["GET"],
            logger_file_name=logger_file_name,
            logger_level=logger_level,
        )

    @EP.response_time
    def run_ep(self, http_request: Request) -> Optional[Dict[str, Any]]:
        return self.return_response_ok("pong")
