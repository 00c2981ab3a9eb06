"""
fect: carriers and combinators for plain Python functions.

Success, failure and asynchrony travel in one value (Carrier) that
flattens, short-circuits and accumulates effect metadata as it passes
through wrapped handlers.

Architecture:
- Carrier / Effects: the value and what is known about it
- wrap / lifted / call: make any function accept carriers, awaitables, Lazy
- match / partial / try_: discharge back into plain values
- Lazy, RemoteValue, if_: deferred values, one-shot rendezvous, branching
"""

# Core types
from ._types import DefectMapper, ErrorDecl, NoError, Thunk

# Errors
from ._errors import (
    CarrierError,
    FectError,
    LazyCycleError,
    MissingHandlerError,
    PendingCarrierError,
    RemoteValueTimeoutError,
    UnhandledMatchError,
)

# Carrier model
from .carrier import (
    Carrier,
    Fail,
    Pending,
    err,
    fail,
    is_carrier,
    is_err,
    is_fail,
    is_ok,
    is_pending,
    ok,
    tag_of,
)
from .effects import EMPTY, Effects, merge_effects

# Tagged errors and defects
from .tagged import DEFECT_TAGS, PromiseRejected, UnknownException, tagged_error

# Laziness
from .lazy import Lazy, force, is_lazy, lazy

# Function wrapping
from .fn import WrapOptions, annotated_errors, wrap

# Discharge
from .match import match, partial, try_

# Lift helpers (reduce boilerplate)
from . import lift
from .lift import call, lifted

# Control flow
from . import control
from .control import defer, if_

# Remote values
from .remote import (
    RemoteRegistry,
    RemoteValue,
    RemoteValueOptions,
    default_registry,
    is_remote_value,
    reject_by_id,
    remote_value,
    resolve_by_id,
)

__all__ = (
    # Types
    "DefectMapper",
    "ErrorDecl",
    "NoError",
    "Thunk",
    # Errors
    "CarrierError",
    "FectError",
    "LazyCycleError",
    "MissingHandlerError",
    "PendingCarrierError",
    "RemoteValueTimeoutError",
    "UnhandledMatchError",
    # Carrier
    "Carrier",
    "EMPTY",
    "Effects",
    "Fail",
    "Pending",
    "err",
    "fail",
    "is_carrier",
    "is_err",
    "is_fail",
    "is_ok",
    "is_pending",
    "merge_effects",
    "ok",
    "tag_of",
    # Tagged
    "DEFECT_TAGS",
    "PromiseRejected",
    "UnknownException",
    "tagged_error",
    # Lazy
    "Lazy",
    "force",
    "is_lazy",
    "lazy",
    # Wrapping
    "WrapOptions",
    "annotated_errors",
    "call",
    "lifted",
    "wrap",
    # Discharge
    "match",
    "partial",
    "try_",
    # Control
    "control",
    "defer",
    "if_",
    # Lift namespace
    "lift",
    # Remote
    "RemoteRegistry",
    "RemoteValue",
    "RemoteValueOptions",
    "default_registry",
    "is_remote_value",
    "reject_by_id",
    "remote_value",
    "resolve_by_id",
)
