"""Volume data structure shared by the read and write paths."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from voldicom.core.errors import AllocationFailure


@dataclass
class Volume:
    """Dense float32 voxel grid with physical spacing.

    Samples are stored ``[Z, Y, X, C]`` so that a C-order dump of the buffer
    packs them channel-fastest, then x, then y, then z.
    """

    voxels: np.ndarray = field(
        default_factory=lambda: np.zeros((0, 0, 0, 0), dtype=np.float32)
    )  # float32 [Z, Y, X, C]
    ux: float = 1.0
    uy: float = 1.0
    uz: float = 1.0

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        spacing: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ) -> Volume:
        """Wrap an ``[Z, Y, X]`` or ``[Z, Y, X, C]`` array."""
        array = np.asarray(array, dtype=np.float32)
        if array.ndim == 3:
            array = array[..., np.newaxis]
        if array.ndim != 4:
            raise ValueError(f"Expected a 3D or 4D array, got {array.ndim}D")
        ux, uy, uz = spacing
        return cls(voxels=np.ascontiguousarray(array), ux=ux, uy=uy, uz=uz)

    @property
    def nx(self) -> int:
        return self.voxels.shape[2]

    @property
    def ny(self) -> int:
        return self.voxels.shape[1]

    @property
    def nz(self) -> int:
        return self.voxels.shape[0]

    @property
    def nc(self) -> int:
        return self.voxels.shape[3]

    @property
    def shape(self) -> tuple[int, int, int, int]:
        """Return (nx, ny, nz, nc)."""
        return (self.nx, self.ny, self.nz, self.nc)

    @property
    def spacing(self) -> tuple[float, float, float]:
        """Return (x, y, z) spacing in mm."""
        return (self.ux, self.uy, self.uz)

    def resize(self, nx: int, ny: int, nz: int, nc: int) -> None:
        """Reallocate the buffer for the given dimensions, zero-filled."""
        if min(nx, ny, nz, nc) < 1:
            raise AllocationFailure(
                f"cannot allocate a volume of dimensions ({nx}, {ny}, {nz}, {nc})"
            )
        try:
            self.voxels = np.zeros((nz, ny, nx, nc), dtype=np.float32)
        except (MemoryError, ValueError) as e:
            raise AllocationFailure(
                f"cannot allocate a volume of dimensions "
                f"({nx}, {ny}, {nz}, {nc}): {e}"
            ) from e

    def free(self) -> None:
        self.voxels = np.zeros((0, 0, 0, 0), dtype=np.float32)

    def voxel(self, x: int, y: int, z: int, c: int = 0) -> float:
        return float(self.voxels[z, y, x, c])

    def set_voxel(self, x: int, y: int, z: int, c: int, value: float) -> None:
        self.voxels[z, y, x, c] = value

    def slab(self, z_start: int, z_end: int) -> np.ndarray:
        """View of the z-layers ``[z_start, z_end)``."""
        return self.voxels[z_start:z_end]

    def max_abs(self) -> float:
        """Maximum absolute sample value (0.0 for an empty volume)."""
        if self.voxels.size == 0:
            return 0.0
        return float(np.abs(self.voxels).max())
