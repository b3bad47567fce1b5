import json
import logging
from datetime import UTC, datetime


class StructuredLogger:
    """Emits audit events as one JSON object per log line through the standard
    logging system, so they share the handlers configured in logging_config.
    """

    def __init__(self, name: str = "tripjournal.events"):
        self._logger = logging.getLogger(name)

    def build_event(self, event: str, **kwargs) -> dict:
        payload = {"timestamp": datetime.now(UTC).isoformat(), "event": event}

        # `extra` dicts are flattened into the top level
        for k, v in kwargs.items():
            if k == "extra" and isinstance(v, dict):
                payload.update(v)
            else:
                payload[k] = v
        return payload

    def log_event(self, event: str, **kwargs) -> None:
        """Emit a structured event, e.g.

        logger.log_event("trip_created", trip_id=..., gallery_images=3)
        """
        payload = self.build_event(event, **kwargs)
        try:
            self._logger.info(json.dumps(payload, default=str))
        except (TypeError, ValueError):
            self._logger.info("%s %s", event, kwargs)


events = StructuredLogger()

__all__ = ["events", "StructuredLogger"]
