"""Build metadata exposed at runtime.

APP_VERSION comes from the APP_VERSION environment variable when set (CI
builds), otherwise from the installed distribution, falling back to "dev"
for a source checkout that was never installed.
"""

import os
from importlib.metadata import PackageNotFoundError, version

DISTRIBUTION_NAME = "hoi-lobby-scout"


def _installed_version() -> str:
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return "dev"


APP_VERSION: str = os.environ.get("APP_VERSION") or _installed_version()
