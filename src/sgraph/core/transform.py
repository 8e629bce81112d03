"""Persistent transform stack and 4x4 affine matrix builders.

A ``TransformStack`` is an immutable linked list of read-only frames. Pushing
returns a new stack that shares every frame below the new top, so cloning a
stack is O(1) and two clones can never observe each other's pushes or pops.
This is what lets every pixel (and every consumer within a pixel) own its own
stack without copying matrices.

Example:
    >>> from src.sgraph.core.transform import TransformStack, translate
    >>> base = TransformStack()
    >>> moved = base.push(translate(0.0, 0.0, -5.0))
    >>> moved.depth, base.depth
    (2, 1)
    >>> moved.pop().depth
    1
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from typing import Optional

import numpy as np
import numpy.typing as npt

from src.sgraph.core.ray import as_vec3, normalize

Matrix = npt.NDArray[np.float64]


def _frozen(matrix: npt.ArrayLike) -> Matrix:
    arr = np.array(matrix, dtype=np.float64)
    if arr.shape != (4, 4):
        raise ValueError(f"Transform must be 4x4, got shape {arr.shape}")
    arr.flags.writeable = False
    return arr


class _Frame:
    """One immutable level of a transform stack."""

    __slots__ = ("matrix", "parent", "depth")

    def __init__(self, matrix: Matrix, parent: Optional[_Frame]) -> None:
        self.matrix = matrix
        self.parent = parent
        self.depth = 1 if parent is None else parent.depth + 1


class TransformStack:
    """An immutable stack of composed 4x4 transforms.

    The top of the stack maps the current traversal scope to view space.
    All operations return new stacks; the receiver is never modified.

    Attributes:
        top: The composed transform at the top of the stack (read-only).
        depth: Number of frames on the stack (always >= 1).
    """

    __slots__ = ("_frame",)

    def __init__(self, matrix: Optional[npt.ArrayLike] = None) -> None:
        base = np.identity(4) if matrix is None else matrix
        self._frame = _Frame(_frozen(base), None)

    @classmethod
    def _from_frame(cls, frame: _Frame) -> TransformStack:
        stack = cls.__new__(cls)
        stack._frame = frame
        return stack

    @classmethod
    def from_matrices(cls, matrices: Iterable[npt.ArrayLike]) -> TransformStack:
        """Build a stack whose frames are the given matrices, bottom first.

        Each matrix is stored as given (not composed with the one below),
        matching a stack filled by successive explicit pushes of full
        modelview matrices.

        Raises:
            ValueError: If ``matrices`` is empty.
        """
        frame: Optional[_Frame] = None
        for m in matrices:
            frame = _Frame(_frozen(m), frame)
        if frame is None:
            raise ValueError("Cannot build a TransformStack from no matrices")
        return cls._from_frame(frame)

    @property
    def top(self) -> Matrix:
        return self._frame.matrix

    @property
    def depth(self) -> int:
        return self._frame.depth

    def push(self, local: Optional[npt.ArrayLike] = None) -> TransformStack:
        """Return a new stack with ``top @ local`` pushed.

        With no argument the current top is duplicated.
        """
        if local is None:
            return TransformStack._from_frame(_Frame(self._frame.matrix, self._frame))
        composed = self._frame.matrix @ np.asarray(local, dtype=np.float64)
        return TransformStack._from_frame(_Frame(_frozen(composed), self._frame))

    def pop(self) -> TransformStack:
        """Return the stack below the top.

        Raises:
            IndexError: If this is the bottom frame.
        """
        if self._frame.parent is None:
            raise IndexError("Cannot pop the bottom frame of a TransformStack")
        return TransformStack._from_frame(self._frame.parent)

    def clone(self) -> TransformStack:
        """Return an independent handle sharing this stack's frames."""
        return TransformStack._from_frame(self._frame)

    def __iter__(self) -> Iterator[Matrix]:
        """Iterate matrices from bottom to top."""
        frames = []
        frame: Optional[_Frame] = self._frame
        while frame is not None:
            frames.append(frame.matrix)
            frame = frame.parent
        return iter(reversed(frames))

    def __len__(self) -> int:
        return self.depth

    def __repr__(self) -> str:
        return f"TransformStack(depth={self.depth})"


# =============================================================================
# Matrix builders
# =============================================================================


def identity() -> Matrix:
    """Return a 4x4 identity matrix."""
    return np.identity(4, dtype=np.float64)


def translate(x: float, y: float, z: float) -> Matrix:
    """Return a translation matrix."""
    m = identity()
    m[:3, 3] = (x, y, z)
    return m


def scale(x: float, y: float, z: float) -> Matrix:
    """Return a non-uniform scale matrix.

    Raises:
        ValueError: If any scale factor is zero (the matrix would be singular).
    """
    if x == 0.0 or y == 0.0 or z == 0.0:
        raise ValueError(f"Scale factors must be non-zero, got ({x}, {y}, {z})")
    return np.diag([x, y, z, 1.0]).astype(np.float64)


def rotate(angle_degrees: float, axis: npt.ArrayLike) -> Matrix:
    """Return a rotation of ``angle_degrees`` about ``axis`` (Rodrigues).

    Raises:
        ValueError: If the axis has zero length.
    """
    a = as_vec3(axis)
    if np.linalg.norm(a) < 1e-12:
        raise ValueError("Rotation axis must be non-zero")
    x, y, z = normalize(a)
    theta = math.radians(angle_degrees)
    c = math.cos(theta)
    s = math.sin(theta)
    t = 1.0 - c
    m = identity()
    m[:3, :3] = [
        [t * x * x + c, t * x * y - s * z, t * x * z + s * y],
        [t * x * y + s * z, t * y * y + c, t * y * z - s * x],
        [t * x * z - s * y, t * y * z + s * x, t * z * z + c],
    ]
    return m


def look_at(
    eye: npt.ArrayLike,
    center: npt.ArrayLike,
    up: npt.ArrayLike = (0.0, 1.0, 0.0),
) -> Matrix:
    """Return the world-to-camera matrix of a camera at ``eye`` facing ``center``.

    The camera looks down its -z axis with +y up, the convention the ray
    tracer's primary rays assume.

    Raises:
        ValueError: If eye and center coincide or up is parallel to the view.
    """
    eye_v = as_vec3(eye)
    # w points from center toward eye (backward)
    w = as_vec3(eye_v - as_vec3(center))
    if np.linalg.norm(w) < 1e-12:
        raise ValueError("look_at eye and center must differ")
    w = normalize(w)
    u = np.cross(as_vec3(up), w)
    if np.linalg.norm(u) < 1e-12:
        raise ValueError("look_at up vector is parallel to the view direction")
    u = normalize(u)
    v = np.cross(w, u)

    m = identity()
    m[0, :3] = u
    m[1, :3] = v
    m[2, :3] = w
    m[:3, 3] = -m[:3, :3] @ eye_v
    return m


def normal_matrix(matrix: npt.ArrayLike) -> Matrix:
    """Return the inverse transpose used to transform surface normals."""
    return np.linalg.inv(np.asarray(matrix, dtype=np.float64)).T
