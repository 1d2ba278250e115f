"""
eta_translator.core.decorators
==============================

Utility decorators used by the REST-endpoint classes.

The decorators are defined as static methods of the ``EP`` namespace class so
they can be used with the ``@EP.response_time`` syntax without having to
instantiate anything.
"""

import time
from typing import Callable, Any

from flask import Response


class EP:
    """
    Namespace container for endpoint-related decorators.

    >>> from eta_translator.core.decorators import EP
    >>> @EP.response_time
    ... def run_ep(self, http_request): ...
    """

    RESPONSE_TIME_HEADER = "X-Response-Time"

    @staticmethod
    def response_time(func: Callable[[Any, Any], Any]) -> Callable:
        """
        Measure how long the wrapped endpoint method takes to execute.

        * A ``dict`` result gets a ``response_time`` key (seconds, float).
        * A :class:`flask.Response` result gets an ``X-Response-Time`` header,
          so fixed-shape JSON bodies stay untouched.

        Any other result is returned unchanged.
        """

        def wrapper(self, http_request=None):
            start = time.time()
            result = func(self, http_request)
            elapsed = time.time() - start
            if isinstance(result, Response):
                result.headers[EP.RESPONSE_TIME_HEADER] = f"{elapsed:.4f}"
            elif isinstance(result, dict):
                result = result.copy()
                result["response_time"] = elapsed
            return result

        return wrapper
