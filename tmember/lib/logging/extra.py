import importlib
import inspect
import json
import logging
import string
import textwrap
import typing as t

import pygments
from pygments.formatters import Terminal256Formatter
from pygments.lexers.data import JsonLexer  # pyright: ignore [reportMissingTypeStubs]
from pygments.style import Style

from tmember.lib.json import JSONEncoder, JSONValue

from .style import LogStyle

ReservedKeys = {
    "exception",
    "args",
    "asctime",
    "created",
    "exc_info",
    "exc_text",
    "filename",
    "funcName",
    "id",
    "levelname",
    "levelno",
    "lineno",
    "log_color",
    "module",
    "msecs",
    "message",
    "msg",
    "name",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "reset",
    "stack_info",
    "taskName",
    "thread",
    "threadName",
}


def resolve_formatter(base: type[logging.Formatter] | str) -> type[logging.Formatter]:
    """Accept a formatter class or its dotted path, as given in a dictConfig document."""
    if isinstance(base, str):
        module, _, name = base.rpartition(".")
        return getattr(importlib.import_module(module), name)
    return base


class ExtraFormatter(logging.Formatter):
    """Delegate to ``base`` and append the record's ``extra={...}`` fields as JSON."""

    def __init__(
        self,
        base: type[logging.Formatter] | str,
        format: str | None,
        datefmt: str | None = None,
        indent: bool | None = True,
        pyg_style: t.Type[Style] = LogStyle,
        style: t.Literal["%", "{", "$"] = "%",
        validate: bool = True,
        *,
        defaults: t.Any = None,
        **kwargs: t.Any,
    ):
        formatter_cls = resolve_formatter(base)
        self.base = formatter_cls(format, datefmt=datefmt, style=style, validate=validate, defaults=defaults, **kwargs)
        self.pyg_style = pyg_style
        self.handler: logging.Handler | None = None
        self.indent = indent

    def format(self, record: logging.LogRecord) -> str:
        if "color_message" in record.__dict__:
            record.msg = record.__dict__.pop("color_message")

        msg = record.getMessage()
        if "\n" in msg:
            formatted = self.base.format(record)
            idx = formatted.find(msg)
            indent = " " * len([c for c in formatted[:idx] if c in string.printable])
            line, *lines = msg.splitlines()
            body = textwrap.indent("\n".join(lines), prefix=indent)
            record.msg = record.message = f"{line}\n{body}"
            record.args = None
        message = self.base.format(record)

        d = record.__dict__
        extra = {k: d[k] for k in set(d.keys()) - ReservedKeys}

        if not extra:
            return message

        encoder = JSONEncoder()

        def encode(obj: t.Any) -> JSONValue:
            try:
                return encoder.default(obj)
            except TypeError:
                return repr(obj)

        if self.handler is None:
            # the handler is not known at construction time; the caller of format() is
            frame = inspect.currentframe()
            caller = frame.f_back.f_locals.get("self") if frame is not None and frame.f_back is not None else None
            if isinstance(caller, logging.Handler):
                self.handler = caller

        js = json.dumps(extra, sort_keys=True, indent=(4 if self.indent else None), default=encode)
        do_color = not getattr(self.base, "no_color", False)
        stream = getattr(self.handler, "stream", None)
        if do_color and stream is not None and stream.isatty():
            hl = pygments.highlight  # pyright: ignore [reportUnknownMemberType, reportUnknownVariableType]
            ps = hl(js, JsonLexer(), Terminal256Formatter(style=self.pyg_style), None)
        else:
            ps = js
        return message + " " + ps.strip()

    def __getattr__(self, name: str) -> t.Any:
        return getattr(self.base, name)
