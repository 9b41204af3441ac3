"""Lightweight JSON logging utilities for pipeline instrumentation."""

from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOG_DIR = Path(__file__).resolve().parents[2] / "artifacts" / "logs"
LOG_FILE_NAME = "pipeline.log"
SENSITIVE_KEYS = {"raw_text", "text", "raw_image", "image_data", "text_dump"}


def resolve_log_dir(log_dir: Optional[str] = None) -> Path:
	if log_dir:
		return Path(log_dir)
	env_dir = os.getenv("RECEIPTBOT_LOG_DIR")
	if env_dir:
		return Path(env_dir)
	return DEFAULT_LOG_DIR


def log_pipeline_event(event: Dict[str, Any], log_dir: Optional[str] = None) -> None:
	"""Persist a structured pipeline event without leaking sensitive payloads."""

	payload: Dict[str, Any] = {
		"timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
	}
	for key, value in event.items():
		if key is None:
			continue
		normalized = str(key)
		if normalized.lower() in SENSITIVE_KEYS:
			continue
		payload[normalized] = value

	target_dir = resolve_log_dir(log_dir)
	try:
		target_dir.mkdir(parents=True, exist_ok=True)
		with (target_dir / LOG_FILE_NAME).open("a", encoding="utf-8") as handle:
			json.dump(payload, handle, ensure_ascii=False, default=str)
			handle.write("\n")
	except Exception as exc:  # pragma: no cover - logging must never break pipeline
		logger.debug("Failed to write pipeline log: %s", exc, exc_info=True)


def log_attempt_event(event: Dict[str, Any], log_dir: Optional[str] = None) -> None:
	"""Record a single provider attempt within a chain."""

	payload = {"event_type": "provider_attempt"}
	payload.update(event)
	log_pipeline_event(payload, log_dir=log_dir)
