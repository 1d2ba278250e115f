import os


class _DontChangeMe:
    MAIN_ENV_PREFIX = "ETA_TRANSLATOR_"


def bool_env_value(env_name: str, default: bool = False) -> bool:
    """
    Read a boolean flag from the environment.

    ``1``, ``true``, ``yes`` and ``on`` (case-insensitive) are treated as
    ``True``; any other non-empty value is ``False``.
    """
    value = os.environ.get(env_name)
    if value is None or not len(value.strip()):
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def list_env_value(env_name: str, default: str = "") -> list:
    """Comma separated environment value as a list of non-empty, stripped items."""
    value = os.environ.get(env_name, default)
    return [v.strip() for v in value.split(",") if len(v.strip())]


# Default languages used when the request does not carry them
DEFAULT_SOURCE_LANG = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}DEFAULT_SOURCE_LANG", "auto"
).strip()

DEFAULT_TARGET_LANG = os.environ.get(
    f"{_DontChangeMe.MAIN_ENV_PREFIX}DEFAULT_TARGET_LANG", "vi"
).strip()


class ProviderTypes:
    GEMINI = "gemini"
    OPENAI = "openai"


POSSIBLE_PROVIDER_TYPES = [
    ProviderTypes.GEMINI,
    ProviderTypes.OPENAI,
]
