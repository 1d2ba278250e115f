from pathlib import Path
from setuptools import setup, find_packages

BASE_DIR = Path(__file__).parent

# ----------------------------------------------------------------------
# Core version & requirements
# ----------------------------------------------------------------------
version = (BASE_DIR / ".version").read_text().strip()
long_description = (BASE_DIR / "README.md").read_text(encoding="utf-8")
requirements = (BASE_DIR / "requirements.txt").read_text().splitlines()

# ----------------------------------------------------------------------
# Production WSGI servers
# ----------------------------------------------------------------------
requirements_api = (BASE_DIR / "requirements_api.txt").read_text().splitlines()

# ----------------------------------------------------------------------
# Extras handling
# ----------------------------------------------------------------------
extras = {
    "api": requirements_api,
    "metrics": ["prometheus-client"],
    "test": ["pytest"],
}

# ----------------------------------------------------------------------
setup(
    name="eta-translator",
    version=version,
    description="Translation REST API with rate limiting and provider fallback",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    packages=find_packages(
        where=".",
        include=["eta_translator*"],
        exclude=("tests", "docs"),
    ),
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require=extras,
    entry_points={
        "console_scripts": {
            "eta-translator-api=eta_translator.rest_api:main",
        }
    },
)
