class MathGraphError(Exception):
    pass


class EvaluationError(MathGraphError):
    """Raised by the expression engine for input it refuses to compile or evaluate."""


class RenderFailure(MathGraphError):
    """Raised when no pixel output can be produced for an equation."""
