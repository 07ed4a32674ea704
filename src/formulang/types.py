from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from typing_extensions import TypeAlias, TypeGuard

from .tree import Node

# ---------- Value Model ----------

@dataclass
class FmNumber:
    value: float
    def __repr__(self) -> str:
        v = float(self.value)
        return str(int(v)) if v.is_integer() else str(v)

@dataclass
class FmBool:
    value: bool
    def __repr__(self) -> str:
        return "true" if self.value else "false"

@dataclass(eq=False)
class FmFn:
    name: str
    params: List[str]
    body: List[Node]      # statements; the last one is the result
    frame: 'Frame'        # Closure frame
    def __repr__(self) -> str:
        param_desc = ", ".join(self.params)
        return f"<fn {self.name}({param_desc})>"

BuiltinFn = Callable[['Frame', List['FmValue']], 'FmValue']

@dataclass(frozen=True)
class FmBuiltin:
    name: str
    fn: BuiltinFn
    arity: Optional[int] = None  # None accepts any argument count
    def __repr__(self) -> str:
        return f"<builtin {self.name}>"

FmValue: TypeAlias = FmNumber | FmBool | FmFn | FmBuiltin

_FM_VALUE_TYPES: Tuple[type, ...] = (FmNumber, FmBool, FmFn, FmBuiltin)

def is_fm_value(value: object) -> TypeGuard[FmValue]:
    return isinstance(value, _FM_VALUE_TYPES)

@dataclass(frozen=True)
class CallRecord:
    """One function invocation, in call order."""
    kind: str                     # "call" or "builtin"
    name: str
    args: Tuple[FmValue, ...] = field(default_factory=tuple)

# ---------- Environment ----------

class Frame:
    """One scope of the scope chain.

    The root frame (no parent) is the session-wide global scope. It also owns
    the history of values bound at global level and, while a calculation is
    collecting one, the call log. Calls made from any child frame are logged on
    the root.
    """

    def __init__(self, parent: Optional['Frame']=None):
        self.parent = parent
        self.vars: Dict[str, FmValue] = {}
        self.history: Dict[str, List[FmValue]] = {}
        self.calls: Optional[List[CallRecord]] = None  # root only; None when not collecting

    @property
    def is_global(self) -> bool:
        return self.parent is None

    def define(self, name: str, val: FmValue) -> None:
        self.vars[name] = val

        if self.is_global:
            self.history.setdefault(name, []).append(val)

    def find(self, name: str) -> Optional['Frame']:
        frame: Optional[Frame] = self

        while frame is not None:
            if name in frame.vars:
                return frame
            frame = frame.parent

        return None

    def get(self, name: str) -> FmValue:
        owner = self.find(name)
        if owner is None:
            raise UndefinedVariable(name)

        return owner.vars[name]

    def assign(self, name: str, val: FmValue) -> None:
        """Overwrite name where it is bound, or bind it here when it is new."""
        owner = self.find(name) or self
        owner.define(name, val)

    @property
    def root(self) -> 'Frame':
        frame = self
        while frame.parent is not None:
            frame = frame.parent
        return frame

    def record_call(self, kind: str, name: str, args: List[FmValue]) -> None:
        log = self.root.calls
        if log is not None:
            log.append(CallRecord(kind=kind, name=name, args=tuple(args)))

# ---------- Exceptions ----------

class FormulaRuntimeError(Exception):
    fm_meta: Optional[object]

    def __init__(self, message: str):
        super().__init__(message)
        self.fm_meta = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        msg = super().__str__()

        meta = getattr(self, "fm_meta", None)
        if meta is None:
            return msg

        line = getattr(meta, "line", None)
        col = getattr(meta, "column", None)

        if line is None:
            return msg

        if col is None:
            return f"{msg} (line {line})"

        return f"{msg} (line {line}, col {col})"

class UndefinedVariable(FormulaRuntimeError):
    def __init__(self, name: str):
        super().__init__(f"Name '{name}' is not defined")
        self.name = name

class UndefinedFunction(UndefinedVariable):
    def __init__(self, name: str):
        FormulaRuntimeError.__init__(self, f"Function '{name}' is not defined")
        self.name = name

class ArityMismatch(FormulaRuntimeError):
    def __init__(self, name: str, expected: int, got: int):
        super().__init__(f"Function '{name}' expects {expected} args; got {got}")
        self.name = name
        self.expected = expected
        self.got = got

class TypeMismatch(FormulaRuntimeError):
    pass

class DivisionByZero(FormulaRuntimeError):
    def __init__(self, message: str = "Division by zero"):
        super().__init__(message)
