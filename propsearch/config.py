# propsearch/config.py
# Environment-aware configuration for the property search API

import os
from typing import Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# CORS origins (dev allows everything, see main.py)
CORS_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

if IS_STAGING or IS_PROD:
    extra_origins = os.environ.get("CORS_ORIGINS", "")
    if extra_origins:
        CORS_ORIGINS.extend(o.strip() for o in extra_origins.split(",") if o.strip())

# Search executor selection ("sample" is the only built-in executor)
SEARCH_EXECUTOR = os.environ.get("SEARCH_EXECUTOR", "sample").strip().lower()

# Size of the deterministic sample data set generated per location
SAMPLE_RESULTS_PER_LOCATION = int(os.environ.get("SAMPLE_RESULTS_PER_LOCATION", "45"))

# Error responses include exception type details (never enable in prod)
INCLUDE_ERROR_DETAILS = os.environ.get(
    "INCLUDE_ERROR_DETAILS", "1" if IS_DEV else "0"
).strip().lower() in ("1", "true", "yes")

print(f"[CONFIG] Environment: {ENV}")
print(f"[CONFIG] Search executor: {SEARCH_EXECUTOR}")
print(f"[CONFIG] Error details: {'on' if INCLUDE_ERROR_DETAILS else 'off'}")
