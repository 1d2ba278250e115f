"""
eta_translator.core.providers.dispatcher
========================================

A thin façade that maps the **string identifier of a provider type** (e.g.
``"gemini"``, ``"openai"``) to the concrete implementation that knows how to
build the structured-output request and read the response envelope for that
backend.

Adding a new backend only requires:

1. creating a class that implements the
   :class:`~eta_translator.core.providers.provider_i.ProviderTypeI` interface, and
2. registering that class in the ``_REGISTRY`` dictionary below.
"""

from __future__ import annotations

from typing import Dict, Type

from eta_translator.base.constants_base import ProviderTypes
from eta_translator.core.providers.provider_i import ProviderTypeI
from eta_translator.core.providers.gemini import GeminiType
from eta_translator.core.providers.openai import OpenAIType


class ProviderTypesDispatcher:
    """
    Dispatcher for concrete ``ProviderTypeI`` implementations.

    The dispatcher raises a :class:`ValueError` if an unknown provider type
    is supplied.
    """

    _REGISTRY: Dict[str, Type[ProviderTypeI]] = {
        ProviderTypes.GEMINI: GeminiType,
        ProviderTypes.OPENAI: OpenAIType,
    }

    @classmethod
    def get(cls, api_type: str) -> ProviderTypeI:
        """
        Resolve ``api_type`` to a concrete ``ProviderTypeI`` instance.

        Raises
        ------
        ValueError
            If ``api_type`` is not present in the registry.
        """
        impl_cls = cls._REGISTRY.get((api_type or "").lower())
        if impl_cls is None:
            raise ValueError(
                f"Unsupported provider type: {api_type}. "
                f"Supported: {', '.join(sorted(cls._REGISTRY))}"
            )
        return impl_cls()
