"""
FlaskEndpointRegistrar

A tiny helper that wires `eta_translator.endpoints.endpoint_i.EndpointI`
objects into a Flask application (or Blueprint).
Only the registration logic is kept – validation of the request is left to
the endpoint implementation itself.
"""

from __future__ import annotations

import logging

from flask import Flask, Blueprint, Response, request, jsonify
from typing import Callable, Iterable, Any, Set, Tuple, Optional

from eta_translator.base.constants import DEFAULT_API_PREFIX
from eta_translator.endpoints.endpoint_i import EndpointI
from eta_translator.utils.logger import prepare_logger


class FlaskEndpointRegistrar:
    """
    Register ``EndpointI`` instances as Flask routes.

    Parameters
    ----------
    app : Flask, optional
        Flask application that will receive the routes.
        Either *app* or *blueprint* must be supplied.
    blueprint : Blueprint, optional
        Blueprint to which the routes will be attached.
    url_prefix : str, optional
        Prefix prepended to every endpoint URL (e.g. ``"/api"``).
    logger : logging.Logger, optional
        Logger used for diagnostic messages.
        If omitted, a module‑level logger is created.
    """

    def __init__(
        self,
        app: Optional[Flask] = None,
        blueprint: Optional[Blueprint] = None,
        url_prefix: str = DEFAULT_API_PREFIX,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if app is None and blueprint is None:
            raise ValueError("Either `app` or `blueprint` must be provided")

        self._app = app
        self._bp = blueprint

        self._prefix = ""
        if url_prefix and len(url_prefix):
            if not url_prefix.startswith("/"):
                url_prefix = "/" + url_prefix
            self._prefix = url_prefix.rstrip("/")

        self._logger = logger or prepare_logger(__name__)
        self._registered_rules: Set[Tuple[str, str]] = set()

    def register_endpoints(self, endpoints: Iterable[EndpointI]) -> None:
        """
        Register a collection of endpoints.

        Parameters
        ----------
        endpoints : Iterable[EndpointI]
            Any iterable producing concrete ``EndpointI`` objects.
        """
        for ep in endpoints:
            self.register_endpoint(ep)

    def register_endpoint(self, endpoint: EndpointI) -> None:
        """
        Register a single endpoint (and its aliases) as Flask views.

        Raises
        ------
        RuntimeError
            If a route with the same URL and HTTP method has already been registered.
        """
        view = self._make_view(endpoint)
        for url in [endpoint.name] + endpoint.aliases:
            self._add_rule(endpoint=endpoint, url=url, view=view)

    def _add_rule(self, endpoint: EndpointI, url: str, view: Callable) -> None:
        # Normalize the rule – ensure it starts with a slash and prepend prefix
        if not url.startswith("/"):
            url = "/" + url
        full_rule = f"{self._prefix}{url}"

        # Detect duplicates
        for method in endpoint.methods:
            key = (full_rule, method)
            if key in self._registered_rules:
                raise RuntimeError(f"Duplicate route: {method} {full_rule}")
            self._registered_rules.add(key)

        endpoint_name = f"{endpoint.__class__.__name__}:{full_rule}"
        target = self._bp if self._bp is not None else self._app
        target.add_url_rule(
            full_rule,
            endpoint=endpoint_name,
            view_func=view,
            methods=endpoint.methods,
        )

        self._logger.info(
            f"Registered endpoint {','.join(endpoint.methods)} {full_rule} "
            f"({endpoint.__class__.__name__})",
        )

    def _make_view(self, endpoint: EndpointI) -> Callable[[], Any]:
        """
        Actual view function generator.

        It is deliberately tiny – the endpoint gets the Flask request as is
        and either returns a ready ``Response`` or a mapping which is
        serialised as JSON.
        """

        def handler():
            try:
                result = endpoint.run_ep(request)
            except Exception:
                # any unexpected error -> 500, without internals
                self._logger.exception(
                    f"Unhandled exception in endpoint: "
                    f"{endpoint.__class__.__name__}",
                )
                return jsonify({"error": "InternalError"}), 500

            if isinstance(result, Response):
                return result
            return jsonify(result or {}), 200

        return handler

    def __enter__(self) -> "FlaskEndpointRegistrar":
        """
        Enter the runtime context and return the registrar instance.
        This makes ``FlaskEndpointRegistrar`` usable with the ``with`` statement.
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """
        Exit the runtime context.

        No special cleanup is required for the registrar, so we simply return
        ``False`` to propagate any exception that occurred inside the `with` block.
        """
        return False
