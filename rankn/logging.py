"""Lazily formatted logging for the engine, with an optional JSON log file.

Messages use str.format syntax and are only formatted if a handler emits
them. The engine logs every subtyping query at DEBUG, so a trace of a check
is one init_logging call away."""

from datetime import datetime, timezone
import inspect
import json
import logging
import logging.handlers
import pathlib
from typing import Dict, Sequence, Union


class RanknLogger:
    """Wraps a logging.Logger so that it's easy to use str.format syntax."""

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    def debug(
        self, format_string: str, *args: object, **kwargs: object
    ) -> None:
        self._log(logging.DEBUG, format_string, args, kwargs)

    def info(
        self, format_string: str, *args: object, **kwargs: object
    ) -> None:
        self._log(logging.INFO, format_string, args, kwargs)

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(
        self,
        level: int,
        format_string: str,
        args: Sequence[object],
        kwargs: Dict[str, object],
    ) -> None:
        # inspect.stack() is expensive
        if not self._logger.isEnabledFor(level):
            return
        # skip _log and the public method
        caller = inspect.stack()[2]
        self._logger.log(
            level,
            _DelayedFormat(format_string, args, kwargs),
            extra={'caller': caller},
        )


def get_logger(name: str) -> RanknLogger:
    python_logger = logging.getLogger(name)
    python_logger.addHandler(logging.NullHandler())
    return RanknLogger(python_logger)


class _DelayedFormat:
    def __init__(
        self,
        format_string: str,
        args: Sequence[object],
        kwargs: Dict[str, object],
    ) -> None:
        self._format_string = format_string
        self._args = args
        self._kwargs = kwargs

    def __str__(self) -> str:
        return self._format_string.format(*self._args, **self._kwargs)


def _record_to_json(record: logging.LogRecord) -> str:
    caller = getattr(record, 'caller', None)
    if caller is None:
        module, file_name = record.module, record.filename
        line_number, function_name = record.lineno, record.funcName
    else:
        module = caller.frame.f_globals['__name__']
        file_name = pathlib.Path(caller.filename).name
        line_number, function_name = caller.lineno, caller.function
    return json.dumps(
        {
            'name': record.name,
            'message': record.getMessage(),
            'level_name': record.levelname,
            'module': module,
            'file_name': file_name,
            'line_number': line_number,
            'function_name': function_name,
            'created': datetime.fromtimestamp(
                record.created, timezone.utc
            ).isoformat(),
        }
    )


class _JSONFormatter(logging.Formatter):
    """One JSON object per record, locating the RanknLogger caller."""

    def format(self, record: logging.LogRecord) -> str:
        return _record_to_json(record)


def init_logging(
    path: Union[str, pathlib.Path], level: int = logging.DEBUG
) -> logging.Handler:
    """Send the package's logs to a rotating file of JSON records.

    Returns the installed handler so the caller can remove it again."""

    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=1048576, backupCount=1
    )
    handler.setFormatter(_JSONFormatter())
    handler.setLevel(level)
    package_logger = logging.getLogger('rankn')
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler
