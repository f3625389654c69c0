class BonsaiError(Exception):
    """Base class for errors raised by the bonsai core."""


class ValidationError(BonsaiError):
    """A save document is missing a field or holds an out-of-range value.

    The caller keeps its previous in-memory state when this is raised.
    """

    def __init__(self, field, reason):
        self.field = field
        self.reason = reason
        super().__init__(f"{field}: {reason}")


class RenderError(BonsaiError):
    """A render did not produce a canvas. The previous canvas stays valid."""


class RenderTimeout(RenderError):
    def __init__(self, timeout):
        self.timeout = timeout
        super().__init__(f"render exceeded {timeout:.1f}s")


class RenderCancelled(RenderError):
    def __init__(self):
        super().__init__("render cancelled by caller")
