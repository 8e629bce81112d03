"""Exception hierarchy for scene-graph ray tracing.

Only ``NotReadyError`` and ``OutputWriteError`` reach the caller of a
full-image trace. The others describe failures that stay local to one
subtree, one light or one texture lookup; the tracer logs them and carries on.
"""


class SceneGraphError(Exception):
    """Base class for all scene-graph rendering errors."""


class NotReadyError(SceneGraphError):
    """Tracing was requested before a root node and a renderer were set."""


class IntersectionError(SceneGraphError):
    """A leaf's mesh could not be intersected (unknown or malformed mesh)."""


class TextureSampleError(SceneGraphError):
    """A texture lookup failed (missing texture or coordinate out of range)."""


class OutputWriteError(SceneGraphError):
    """The rendered image could not be written to persistent storage."""


class RenderCancelled(SceneGraphError):
    """A trace was cancelled between scan lines.

    Attributes:
        rows_done: Number of scan lines completed before cancellation.
    """

    def __init__(self, rows_done: int, rows_total: int) -> None:
        super().__init__(f"Render cancelled after {rows_done}/{rows_total} rows")
        self.rows_done = rows_done
        self.rows_total = rows_total
