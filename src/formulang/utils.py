from __future__ import annotations

import os
import sys
import traceback

DEBUG_PY_TRACE_ENV = "FORMULANG_DEBUG_PY_TRACE"


def debug_py_trace_enabled() -> bool:
    """True when runtime errors should also print their Python traceback."""
    return os.environ.get(DEBUG_PY_TRACE_ENV, "").lower() in ("1", "true", "yes", "on")


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        os.environ[DEBUG_PY_TRACE_ENV] = "1"
    else:
        os.environ.pop(DEBUG_PY_TRACE_ENV, None)


def report_error(exc: BaseException) -> None:
    """Print exc to stderr, plus its Python traceback when tracing is on."""
    print(f"Error: {exc}", file=sys.stderr)

    if debug_py_trace_enabled() and exc.__traceback__ is not None:
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_tb(exc.__traceback__)), file=sys.stderr, end="")
