from .branch import Deferred, If, IfElse, defer, if_

__all__ = (
    "Deferred",
    "If",
    "IfElse",
    "defer",
    "if_",
)
