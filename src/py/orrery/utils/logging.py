import os
import sys
from enum import Enum
from typing import NamedTuple, Any, TextIO
from .primitives import TPrimitive
from .term import Term

DEBUG: bool = os.getenv("ORRERY_DEBUG", "0") == "1"

ORIGIN: str = "orrery"


class LogType(Enum):
	Message = 0
	Event = 20


class LogLevel(Enum):
	Debug = 0
	Info = 10
	Warning = 30
	Error = 40  # A managed error
	Exception = 50  # An un-managed error


LOG_LEVEL_COLOR = {
	LogLevel.Debug: 31,
	LogLevel.Info: 75,
	LogLevel.Warning: 202,
	LogLevel.Error: 160,
	LogLevel.Exception: 124,
}


class LogEntry(NamedTuple):
	level: LogLevel
	type: LogType = LogType.Message
	message: str | None = None
	value: Any = None
	context: dict[str, TPrimitive] | None = None
	icon: str | None = None
	origin: str = ORIGIN


def formatData(value: Any) -> str:
	if value is None or value == () or value == [] or value == {}:
		return "◌"
	elif isinstance(value, dict):
		return " ".join(
			f"{Term.BOLD}{k}{Term.RESET}={formatData(v)}" for k, v in value.items()
		)
	elif isinstance(value, (list, tuple)):
		return ",".join(formatData(v) for v in value)
	elif isinstance(value, str):
		return repr(value) if " " in value else value
	elif isinstance(value, bool):
		return "✓" if value else "✗"
	elif isinstance(value, float):
		return f"{value:0.2f}"
	else:
		return str(value)


def stream(entry: LogEntry) -> TextIO:
	"""Request lines and messages go to stdout, problems to stderr. The
	streams are looked up on each call so that they can be redirected."""
	return sys.stderr if entry.level.value >= LogLevel.Warning.value else sys.stdout


def render(entry: LogEntry) -> str:
	clr: str = Term.Color(LOG_LEVEL_COLOR[entry.level])
	prefix: str = f"{clr}{Term.BOLD}[{entry.origin}]"
	context: str = f" {formatData(entry.context)}" if entry.context else ""
	if entry.type is LogType.Event:
		# Events read as `<name> <value>`, ie. `200 /index.html`
		value: str = "" if entry.value is None else f" {formatData(entry.value)}"
		line = f"{prefix} {entry.message}{Term.RESET}{value}{context}"
	else:
		icon: str = f" {entry.icon}" if entry.icon else ""
		code: str = "" if entry.value is None else f" [{entry.value}]"
		line = f"{prefix}{Term.RESET}{icon} {entry.message}{code}{context}"
	return f"{line}{Term.RESET}\n"


def send(entry: LogEntry) -> LogEntry:
	out: TextIO = stream(entry)
	out.write(render(entry))
	out.flush()
	return entry


def debug(message: str, **context: TPrimitive) -> LogEntry | None:
	if not DEBUG:
		return None
	return send(LogEntry(LogLevel.Debug, message=message, context=context))


def info(message: str, *, icon: str | None = None, **context: TPrimitive) -> LogEntry:
	return send(LogEntry(LogLevel.Info, message=message, context=context, icon=icon))


def warning(message: str, **context: TPrimitive) -> LogEntry:
	return send(LogEntry(LogLevel.Warning, message=message, context=context))


def error(message: str, code: int | str | None, **context: TPrimitive) -> LogEntry:
	return send(
		LogEntry(LogLevel.Error, message=message, value=code, context=context)
	)


def event(name: str, value: Any = None, **context: TPrimitive) -> LogEntry:
	"""Logs something that happened, like a request being served."""
	return send(
		LogEntry(
			LogLevel.Info,
			type=LogType.Event,
			message=name,
			value=value,
			context=context,
		)
	)


def exception(exception: BaseException, message: str | None = None) -> BaseException:
	"""Writes the exception and its traceback to stderr. Returns the
	exception so that this can be used as `raise exception(e)`."""
	try:
		out = sys.stderr
		out.write(
			f"!!! EXCP {f'{message}: ' if message else ''}[{exception.__class__.__name__}] {exception}\n"
		)
		tb = exception.__traceback__
		while tb:
			code = tb.tb_frame.f_code
			out.write(
				f"... in {code.co_name:15s} at {tb.tb_lineno:4d} in {code.co_filename}\n",
			)
			tb = tb.tb_next
		out.flush()
	except Exception:  # nosec: B110
		# Called from exception handlers, so it must never raise
		pass
	return exception


# EOF
