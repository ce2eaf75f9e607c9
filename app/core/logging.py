import logging


class RedactionFilter(logging.Filter):
    """Keep prompts, raw image payloads and keys out of structured logs."""

    BLOCKED_KEYS = {"prompt", "image_data", "api_key"}

    def filter(self, record: logging.LogRecord) -> bool:
        for key in self.BLOCKED_KEYS:
            if hasattr(record, key):
                setattr(record, key, "[REDACTED]")
        return True


def configure_logging() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    root = logging.getLogger()
    redaction = RedactionFilter()
    root.addFilter(redaction)
    for handler in root.handlers:
        handler.addFilter(redaction)
