"""
Provider fallback engine.

:class:`ProviderFallbackEngine` builds one prompt for a validated request and
tries the configured providers strictly in order, one at a time, stopping at
the first success.  Per request the engine moves through::

    PENDING -> TRYING(p1) -> SUCCEEDED
                          -> TRYING(p2) -> ... -> SUCCEEDED | ALL_FAILED

An attempt fails when the call errors or times out, the status is not 2xx,
the envelope carries no generated text, or that text is not a JSON object
with the result fields.  Failures are logged and never propagate; only the
exhaustion of the whole list is reported, as
:class:`~eta_translator.core.errors.AllProvidersFailed`.

Every attempt has its own timeout.  An overall deadline bounds the loop, so
the worst case is ``overall_timeout`` and not ``providers x timeout``.
"""

import enum
import json
import time
import logging
import threading
import concurrent.futures as cf

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from eta_translator.base.constants import PROVIDER_TIMEOUT, OVERALL_TIMEOUT
from eta_translator.base.providers_config import ProviderConfig
from eta_translator.core.errors import AllProvidersFailed
from eta_translator.core.prompt import build_prompt
from eta_translator.core.providers.dispatcher import ProviderTypesDispatcher
from eta_translator.core.data_models.translation import (
    RESULT_FIELDS,
    ProviderAttempt,
    TranslationRequest,
    TranslationResult,
)


class FallbackState(enum.Enum):
    PENDING = "pending"
    TRYING = "trying"
    SUCCEEDED = "succeeded"
    ALL_FAILED = "all_failed"


class ProviderAttemptError(Exception):
    """Failure of a single provider attempt; recovered by the engine."""


@dataclass
class FallbackOutcome:
    state: FallbackState = FallbackState.PENDING
    result: Optional[TranslationResult] = None
    attempts: List[ProviderAttempt] = field(default_factory=list)


class ProviderFallbackEngine:
    """
    Parameters
    ----------
    providers : List[ProviderConfig]
        Providers in priority order; the order is the fallback order.
    attempt_timeout : float
        Timeout in seconds of a single provider call.
    overall_timeout : float
        Upper bound in seconds for the whole loop.
    logger : logging.Logger, optional
        Logger for attempt diagnostics.
    metrics : optional
        Object with ``inc_provider_attempt(provider_id, outcome)``; used to
        count attempts when Prometheus metrics are enabled.
    max_workers : int, optional
        Size of the thread pool running the outbound calls.

    Notes
    -----
    Each call runs in a pool thread and the caller waits at most the attempt
    timeout, so a slow upstream (e.g. one trickling its body byte by byte)
    cannot hold the request past the deadline.  The abandoned call stops
    reading at its next chunk.
    """

    READ_CHUNK_SIZE = 1024

    def __init__(
        self,
        providers: List[ProviderConfig],
        attempt_timeout: float = PROVIDER_TIMEOUT,
        overall_timeout: float = OVERALL_TIMEOUT,
        logger: Optional[logging.Logger] = None,
        metrics=None,
        max_workers: Optional[int] = None,
    ):
        if not providers:
            raise ValueError("At least one provider is required!")

        self.providers = list(providers)
        self.attempt_timeout = attempt_timeout
        self.overall_timeout = overall_timeout
        self.logger = logger or logging.getLogger(__name__)
        self._metrics = metrics
        self._executor = cf.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="provider-call"
        )

    def is_configured(self) -> bool:
        """``True`` when at least one provider has a credential."""
        return any(p.api_token for p in self.providers)

    def translate(self, request: TranslationRequest) -> TranslationResult:
        """
        Translate *request* with the first provider that succeeds.

        Raises
        ------
        AllProvidersFailed
            When every provider failed or the overall deadline passed.
        """
        outcome = self.run(request)
        if outcome.state is not FallbackState.SUCCEEDED:
            raise AllProvidersFailed("All models failed")
        return outcome.result

    def run(self, request: TranslationRequest) -> FallbackOutcome:
        outcome = FallbackOutcome()
        prompt = build_prompt(request)
        deadline = time.monotonic() + self.overall_timeout

        for provider in self.providers:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self.logger.warning(
                    f"Overall deadline of {self.overall_timeout}s exceeded, "
                    f"{provider.id} and following providers are skipped"
                )
                break

            outcome.state = FallbackState.TRYING
            attempt, result = self._attempt(
                provider=provider,
                prompt=prompt,
                timeout=min(self.attempt_timeout, remaining),
            )
            outcome.attempts.append(attempt)
            if self._metrics:
                self._metrics.inc_provider_attempt(
                    provider.id, "success" if attempt.success else "failure"
                )

            if result is not None:
                outcome.state = FallbackState.SUCCEEDED
                outcome.result = result
                return outcome

        outcome.state = FallbackState.ALL_FAILED
        self.logger.error(
            "All providers failed: "
            + ", ".join(f"{a.provider_id}={a.error_reason}" for a in outcome.attempts)
        )
        return outcome

    def _attempt(self, provider: ProviderConfig, prompt: str, timeout: float):
        start = time.monotonic()
        try:
            output = self._call_provider(provider, prompt, timeout)
            result = TranslationResult.from_provider_output(output)
        except ProviderAttemptError as e:
            latency = time.monotonic() - start
            self.logger.warning(f"[{provider.id}] failed: {e}")
            return ProviderAttempt(provider.id, False, latency, str(e)), None
        except Exception as e:
            latency = time.monotonic() - start
            self.logger.exception(f"[{provider.id}] unexpected error")
            return (
                ProviderAttempt(provider.id, False, latency, f"unexpected: {e}"),
                None,
            )

        latency = time.monotonic() - start
        self.logger.info(f"[{provider.id}] succeeded in {latency:.2f}s")
        return ProviderAttempt(provider.id, True, latency), result

    def _call_provider(
        self, provider: ProviderConfig, prompt: str, timeout: float
    ) -> Dict[str, Any]:
        if not provider.api_token:
            raise ProviderAttemptError("missing credential")

        provider_type = ProviderTypesDispatcher.get(provider.api_type)
        request_kwargs = provider_type.prepare_request(provider, prompt)

        cancelled = threading.Event()
        future = self._executor.submit(
            self._fetch, request_kwargs, timeout, cancelled
        )
        try:
            body = future.result(timeout=timeout)
        except cf.TimeoutError:
            cancelled.set()
            raise ProviderAttemptError(f"timeout after {timeout:.1f}s")

        try:
            envelope = json.loads(body)
        except ValueError:
            raise ProviderAttemptError("response is not JSON")

        text = provider_type.extract_text(envelope)
        if not text:
            raise ProviderAttemptError("returned empty")

        return self._decode_output(text)

    def _fetch(
        self,
        request_kwargs: Dict[str, Any],
        timeout: float,
        cancelled: threading.Event,
    ) -> bytes:
        """
        POST the request and read the body, giving up once *cancelled* is
        set or *timeout* seconds have passed.  Runs in a pool thread.
        """
        deadline = time.monotonic() + timeout
        if cancelled.is_set():
            raise ProviderAttemptError("cancelled before start")

        try:
            response = requests.post(timeout=timeout, stream=True, **request_kwargs)
        except requests.exceptions.Timeout:
            raise ProviderAttemptError(f"timeout after {timeout:.1f}s")
        except requests.exceptions.RequestException as e:
            raise ProviderAttemptError(f"request error: {e.__class__.__name__}")

        try:
            if not 200 <= response.status_code < 300:
                raise ProviderAttemptError(f"status {response.status_code}")

            chunks = []
            for chunk in response.iter_content(chunk_size=self.READ_CHUNK_SIZE):
                if cancelled.is_set() or time.monotonic() > deadline:
                    raise ProviderAttemptError(f"timeout after {timeout:.1f}s")
                if chunk:
                    chunks.append(chunk)
            return b"".join(chunks)
        except requests.exceptions.Timeout:
            raise ProviderAttemptError(f"timeout after {timeout:.1f}s")
        except requests.exceptions.RequestException as e:
            raise ProviderAttemptError(f"request error: {e.__class__.__name__}")
        finally:
            response.close()

    @staticmethod
    def _decode_output(text: str) -> Dict[str, Any]:
        try:
            output = json.loads(text)
        except json.JSONDecodeError as e:
            raise ProviderAttemptError(f"output is not valid JSON: {e.msg}")

        if not isinstance(output, dict):
            raise ProviderAttemptError("output is not a JSON object")
        if not any(name in output for name in RESULT_FIELDS):
            raise ProviderAttemptError("output has none of the result fields")
        return output
