import json
import logging


def setup_logging(level: str = "INFO", json_logs: bool = False) -> None:
    logging.basicConfig(level=level.upper())
    if json_logs:
        logging.getLogger().handlers = [JSONLogHandler()]


class JSONLogHandler(logging.StreamHandler):
    def emit(self, record: logging.LogRecord) -> None:  # type: ignore[override]
        try:
            msg = {
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            if record.exc_info:
                msg["exc_info"] = logging.Formatter().formatException(record.exc_info)
            self.stream.write(json.dumps(msg) + "\n")
        except Exception:
            super().emit(record)
