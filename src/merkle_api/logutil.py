import logging
import re
from typing import Iterable, Union


class RedactingFilter(logging.Filter):
    """Redact signing-key material from log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = str(record.getMessage())
            msg = re.sub(
                r"\b(secret|private_key|key|sk|sk_b64)=\S+", r"\1=***", msg, flags=re.IGNORECASE
            )
            record.msg = msg
            record.args = None
        except (TypeError, ValueError):
            pass
        return True


def setup_logging(
    level: Union[int, str] = logging.INFO,
    loggers: Iterable[str] = ("merkle_api", "merkle_cli", "uvicorn", "uvicorn.access"),
) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level)
    f = RedactingFilter()
    for name in loggers:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.addFilter(f)
