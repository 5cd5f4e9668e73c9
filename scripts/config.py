# ===========================================
# config.py
# ===========================================

## \file config.py
## \brief Loads environment-based configuration for schema provisioning.
##
## \par Description
##     Central configuration module that reads environment variables via `dotenv`
##     and exposes all necessary settings for:
##     - The PostgreSQL/TimescaleDB connection
##     - The benchmark database name
##     - Index and hypertable options used when planning the schema
##
##     This module wraps `os.getenv()` via the `env()` helper, enabling
##     fallback defaults and central management of required keys.
##
## \par Usage
##     from scripts.config import PG_CONNECT, DB_NAME, ...
##     `scripts/setup.py` uses these values as defaults for its CLI flags.
##
## \par Notes
##     - Loads from `.env` file in the project root (via `python-dotenv`)
##     - Counts are cast to `int` and flags to `bool` at load time
##     - CHUNK_TIME accepts Go-style durations such as `12h`, `90m` or `1h30m`


from datetime import timedelta
from dotenv import load_dotenv
import os
import re


load_dotenv()

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_DURATION_MICROSECONDS = {
    "ns": 0.001,
    "us": 1,
    "µs": 1,
    "ms": 1_000,
    "s": 1_000_000,
    "m": 60_000_000,
    "h": 3_600_000_000,
}

def env(key, default=None):
    """!Retrieve an environment variable with an optional default.

    @param key The environment variable key to read.
    @param default The fallback value to use if the variable is not set.

    @return The environment value as a string, or the default if not found.
    """
    return os.getenv(key, default)

def env_bool(key, default=False):
    value = env(key)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")

def parse_duration(value: str) -> timedelta:
    """!Parses a duration such as "12h" or "1h30m" into a timedelta.

    @param value Concatenated number+unit pairs; units are ns, us, ms, s, m, h.

    @return The total duration.

    @throws ValueError If the string is empty or contains anything else.
    """
    text = value.strip()
    total = timedelta()
    pos = 0
    for match in _DURATION_RE.finditer(text):
        if match.start() != pos:
            break
        total += timedelta(microseconds=float(match.group(1)) * _DURATION_MICROSECONDS[match.group(2)])
        pos = match.end()

    if not text or pos != len(text):
        raise ValueError(f"invalid duration: {value!r}")
    return total

PG_CONNECT = env("PG_CONNECT", "host=localhost user=postgres sslmode=disable")
DB_NAME = env("DB_NAME", "benchmark")

IN_TABLE_TAG = env_bool("IN_TABLE_TAG", True)
FIELD_INDEX = env("FIELD_INDEX", "value-major")
FIELD_INDEX_COUNT = int(env("FIELD_INDEX_COUNT", 0))
PARTITION_INDEX = env_bool("PARTITION_INDEX", True)
TIME_INDEX = env_bool("TIME_INDEX", False)
TIME_PARTITION_INDEX = env_bool("TIME_PARTITION_INDEX", False)

USE_HYPERTABLE = env_bool("USE_HYPERTABLE", True)
NUMBER_PARTITIONS = int(env("NUMBER_PARTITIONS", 1))
CHUNK_TIME = parse_duration(env("CHUNK_TIME", "12h"))
