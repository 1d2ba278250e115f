"""
Endpoint abstraction layer for the eta-translator REST service.

The module defines the abstract base class that represents a *single* HTTP
endpoint.  Concrete implementations inherit from it and provide the request
handling logic in :meth:`EndpointI.run_ep`.

The class exposes a small public API:

* ``name`` – the URL path of the endpoint.
* ``aliases`` – additional URL paths served by the same endpoint.
* ``methods`` – the HTTP verbs routed to the endpoint.
* ``run_ep`` – the entry point called by the Flask registrar.
"""

import abc

from typing import Any, Dict, List, Optional

from flask import Request, Response

from eta_translator.base.constants import REST_API_LOG_LEVEL
from eta_translator.utils.logger import prepare_logger


class EndpointI(abc.ABC):
    """
    Abstract representation of a single REST endpoint.

    Attributes
    ----------
    _ep_name: str
        Relative URL path of the endpoint (e.g. ``"translate"``).
    _ep_methods: List[str]
        HTTP methods routed to this endpoint.
    _ep_aliases: List[str]
        Additional relative URL paths routed to this endpoint.
    logger: logging.Logger
        Logger configured with the supplied log file and level.
    """

    METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
    """HTTP methods an endpoint may be routed for."""

    def __init__(
        self,
        ep_name: str,
        methods: List[str],
        logger_level: Optional[str] = REST_API_LOG_LEVEL,
        logger_file_name: Optional[str] = None,
        aliases: Optional[List[str]] = None,
    ):
        """
        Initialise an endpoint definition.

        Parameters
        ----------
        ep_name :
            URL fragment that identifies this endpoint (e.g. ``"translate"``).
        methods :
            HTTP verbs routed to the endpoint, each one of :attr:`METHODS`.
        logger_level :
            Logging level name (``"INFO"``, ``"DEBUG"``, …).
        logger_file_name :
            Path to a file where log records will be written.  When ``None``
            records go to stderr only.
        aliases :
            Additional URL fragments served by the same endpoint.

        Raises
        ------
        ValueError
            If any of ``methods`` is not listed in :attr:`METHODS`.
        """
        self._ep_name = ep_name
        self._ep_aliases = list(aliases or [])
        self._ep_methods = [m.upper() for m in methods]
        self._check_methods_are_allowed(methods=self._ep_methods)

        self.logger = prepare_logger(
            logger_name=f"{__name__}.{self.__class__.__name__}",
            logger_file_name=logger_file_name,
            log_level=logger_level,
        )

    # ------------------------------------------------------------------
    # Public read‑only properties
    # ------------------------------------------------------------------
    @property
    def name(self) -> str:
        return self._ep_name

    @property
    def aliases(self) -> List[str]:
        return list(self._ep_aliases)

    @property
    def methods(self) -> List[str]:
        return list(self._ep_methods)

    # ------------------------------------------------------------------
    # Core workflow
    # ------------------------------------------------------------------
    @abc.abstractmethod
    def run_ep(self, http_request: Request) -> Response | Dict[str, Any] | None:
        """
        Execute the endpoint for the current HTTP request.

        Returns
        -------
        Response | dict | None
            A ready :class:`flask.Response`, or a mapping which the registrar
            serialises as JSON with status 200.
        """
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    @staticmethod
    def return_response_ok(body: Any) -> Dict[str, Any]:
        """
        Build a successful response payload following the convention
        ``{"status": True, "body": <user‑data>}``.
        """
        return {"status": True, "body": body}

    def _check_methods_are_allowed(self, methods: List[str]) -> None:
        if not len(methods):
            raise ValueError(f"Endpoint {self._ep_name} has no methods!")
        for method in methods:
            if method not in self.METHODS:
                raise ValueError(
                    f"Unsupported method {method} for endpoint {self._ep_name}. "
                    f"Allowed: {', '.join(self.METHODS)}"
                )
