import os
import logging
from pathlib import Path
from typing import Optional

try:
	from dotenv import load_dotenv
except ImportError:
	logging.warning("python-dotenv not available; using environment variables only")
else:
	loaded = load_dotenv()
	if not loaded and Path(".env").exists():
		raise RuntimeError(".env file present but failed to load")


# Name of the in-progress snapshot written on interrupt; reserved, so the
# output file may never use it.
CHECKPOINT_FILE = "working.json"
DEFAULT_OUTPUT_FILE = "output.json"

SCOPE_MODES = ("prefix", "boundary")


def get_str_env(name: str, default: str) -> str:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	return raw


def get_optional_str_env(name: str) -> Optional[str]:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return None
	return raw


def get_int_env(name: str, default: int) -> int:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return int(raw)
	except ValueError:
		logging.exception("Invalid %s: %r", name, raw)
		return default


def get_float_env(name: str, default: float) -> float:
	raw = os.getenv(name)
	if raw is None or raw == "":
		return default
	try:
		return float(raw)
	except ValueError:
		logging.exception("Invalid %s: %r", name, raw)
		return default


def user_agent() -> str:
	return get_str_env("USER_AGENT", "ScopeCrawl/0.1")


def http_timeout_seconds() -> int:
	return get_int_env("HTTP_TIMEOUT", 10)


def max_workers() -> int:
	workers = get_int_env("SCOPECRAWL_MAX_WORKERS", 4)
	if workers < 1:
		logging.warning("SCOPECRAWL_MAX_WORKERS must be >= 1, got %s; using 1", workers)
		return 1
	return workers


def scope_mode() -> str:
	mode = (get_str_env("SCOPECRAWL_SCOPE_MODE", "prefix") or "prefix").strip().lower()
	if mode not in SCOPE_MODES:
		logging.warning("Unknown SCOPECRAWL_SCOPE_MODE %r; using 'prefix'", mode)
		return "prefix"
	return mode


def poll_interval_seconds() -> float:
	return get_float_env("SCOPECRAWL_POLL_INTERVAL", 0.5)
