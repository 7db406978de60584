"""
Discretized prey field.

Manages the per-cell prey density and the cell -> patch membership layer,
together with the registry of the patches those cells belong to. Works for
2D and 3D domains; the number of axes follows ``domain_size``.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple

import numpy as np

from batforage.landscape.patches import Patch, PatchRegistry

logger = logging.getLogger("batforage.landscape.resource_field")

# Membership id of cells outside every patch footprint
UNASSIGNED: int = 0


class ResourceField:
    """
    Prey density grid plus patch membership.

    Cell ``k`` along an axis covers ``[k * cell_size, (k + 1) * cell_size)``
    and its center is at ``(k + 0.5) * cell_size``.

    Data layers:
    - prey: non-negative prey count per cell
    - membership: owning patch id per cell (``UNASSIGNED`` when free)
    """

    def __init__(self, domain_size: Sequence[float], cell_size: float = 1.0):
        """
        Initialize an empty field.

        Args:
            domain_size: Extent of the domain along each axis (2 or 3 values)
            cell_size: Edge length of one cell
        """
        self.domain_size = tuple(float(v) for v in domain_size)
        self.cell_size = float(cell_size)
        self.shape = tuple(max(1, int(np.ceil(v / self.cell_size))) for v in self.domain_size)

        self._prey = np.zeros(self.shape, dtype=np.float64)
        self._membership = np.zeros(self.shape, dtype=np.int32)
        self.patches = PatchRegistry(ndim=len(self.shape))

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @property
    def prey(self) -> np.ndarray:
        """Read-only view of the prey layer."""
        view = self._prey.view()
        view.flags.writeable = False
        return view

    @property
    def membership(self) -> np.ndarray:
        """Read-only view of the membership layer."""
        view = self._membership.view()
        view.flags.writeable = False
        return view

    # ------------------------------------------------------------------
    # Spatial lookups
    # ------------------------------------------------------------------

    def cell_index(self, position) -> Optional[Tuple[int, ...]]:
        """
        Convert a continuous position to the index of the containing cell.

        Returns:
            Index tuple, or None if the position lies outside the field
        """
        pos = np.asarray(position, dtype=float)
        if pos.shape != (self.ndim,):
            raise ValueError(
                f"position has {pos.size} coordinates, field has {self.ndim} axes"
            )
        if np.any(pos < 0) or np.any(pos >= self.domain_size):
            return None
        idx = np.floor(pos / self.cell_size).astype(int)
        # Domain extents that are not a multiple of cell_size
        idx = np.minimum(idx, np.array(self.shape) - 1)
        return tuple(int(i) for i in idx)

    def cell_center(self, index: Tuple[int, ...]) -> np.ndarray:
        """Center coordinates of a cell."""
        return (np.asarray(index, dtype=float) + 0.5) * self.cell_size

    def patch_at(self, position) -> int:
        """
        Patch id of the cell containing a position.

        Positions outside the field and cells outside every patch footprint
        both yield ``UNASSIGNED``.
        """
        idx = self.cell_index(position)
        if idx is None:
            return UNASSIGNED
        return int(self._membership[idx])

    def prey_at(self, position) -> float:
        """Prey remaining in the cell containing a position (0 outside the field)."""
        idx = self.cell_index(position)
        if idx is None:
            return 0.0
        return float(self._prey[idx])

    def is_prey_bearing(self, position) -> bool:
        """True if the position lies on a patch cell that still holds prey."""
        idx = self.cell_index(position)
        if idx is None:
            return False
        return self._membership[idx] != UNASSIGNED and self._prey[idx] > 0

    # ------------------------------------------------------------------
    # Daily regeneration
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Remove all prey, membership and patches."""
        self._prey.fill(0.0)
        self._membership.fill(UNASSIGNED)
        self.patches.clear()

    def regenerate(
        self,
        n_patches: int,
        rng: np.random.Generator,
        radius_range: Tuple[float, float],
        prey_range: Tuple[float, float],
        capacity_range: Tuple[int, int],
        bounds: Optional[Sequence[float]] = None,
    ) -> PatchRegistry:
        """
        Destroy the current patches and sample a new set.

        Centers are uniform over ``bounds`` (the whole domain by default).
        Each patch stamps every cell whose center lies within its radius
        with a prey amount drawn from ``prey_range``. Overlapping patches
        are allowed; an overlapped cell belongs to the patch stamped last
        and its prey is moved out of the previous owner's total.

        Only the bounding box of each patch is touched, so the cost scales
        with the summed patch areas rather than the field size.

        Returns:
            The refreshed patch registry
        """
        self.clear()
        extent = np.asarray(bounds if bounds is not None else self.domain_size, dtype=float)
        if extent.shape != (self.ndim,):
            raise ValueError(f"bounds must have {self.ndim} values")

        for patch_id in range(1, n_patches + 1):
            center = rng.uniform(0.0, extent)
            radius = float(rng.uniform(*radius_range))
            capacity = int(rng.integers(capacity_range[0], capacity_range[1] + 1))
            patch = Patch(id=patch_id, center=center, radius=radius, capacity=capacity)
            self.patches.add(patch)
            self._stamp(patch, rng, prey_range)

        for patch in self.patches:
            patch.initial_prey = patch.total_prey

        logger.debug(
            "Regenerated %d patches (generation %d), total prey %.1f",
            n_patches, self.patches.generation, self.patches.total_prey,
        )
        return self.patches

    def _bounding_box(self, patch: Patch) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """Cell index range [lo, hi) covering a patch, None if it misses the field."""
        lo = np.floor((patch.center - patch.radius) / self.cell_size).astype(int)
        hi = np.floor((patch.center + patch.radius) / self.cell_size).astype(int) + 1
        lo = np.clip(lo, 0, self.shape)
        hi = np.clip(hi, 0, self.shape)
        if np.any(hi <= lo):
            return None
        return lo, hi

    def _stamp(self, patch: Patch, rng: np.random.Generator, prey_range: Tuple[float, float]) -> None:
        """Write a patch footprint into the prey and membership layers."""
        box = self._bounding_box(patch)
        if box is None:
            return
        lo, hi = box

        window = tuple(slice(a, b) for a, b in zip(lo, hi))
        axes = [(np.arange(a, b) + 0.5) * self.cell_size for a, b in zip(lo, hi)]
        grids = np.meshgrid(*axes, indexing="ij")
        dist2 = sum((g - c) ** 2 for g, c in zip(grids, patch.center))
        mask = dist2 <= patch.radius ** 2
        n_cells = int(mask.sum())
        if n_cells == 0:
            return

        prey_view = self._prey[window]
        member_view = self._membership[window]

        # Last writer wins: hand overwritten cells' prey back out of their old owner
        previous = member_view[mask]
        if np.any(previous != UNASSIGNED):
            lost = np.bincount(previous, weights=prey_view[mask], minlength=patch.id)
            for old_id in np.nonzero(lost)[0]:
                old = self.patches.get(int(old_id))
                if old is not None:
                    old.total_prey = max(0.0, old.total_prey - float(lost[old_id]))

        values = rng.uniform(prey_range[0], prey_range[1], size=n_cells)
        prey_view[mask] = values
        member_view[mask] = patch.id
        patch.total_prey = float(values.sum())

    # ------------------------------------------------------------------
    # Consumption and occupancy
    # ------------------------------------------------------------------

    def consume(self, cell: Tuple[int, ...], amount: float) -> float:
        """
        Remove prey from a cell and its owning patch.

        Args:
            cell: Cell index tuple
            amount: Requested amount

        Returns:
            Amount actually removed, ``min(amount, available)``
        """
        if amount <= 0:
            return 0.0
        available = float(self._prey[cell])
        removed = min(float(amount), available)
        if removed <= 0:
            return 0.0
        self._prey[cell] = max(0.0, available - removed)

        patch = self.patches.get(int(self._membership[cell]))
        if patch is not None:
            patch.total_prey = max(0.0, patch.total_prey - removed)
        return removed

    def occupancy_reset(self) -> None:
        """Zero every patch occupancy counter before bats report in."""
        self.patches.reset_occupancy()

    def nearest_prey_cell(self, position, patch_id: int) -> Optional[np.ndarray]:
        """
        Center of the cell of a patch that still holds prey and lies closest
        to a position.

        Only the patch's bounding box is searched. Ties go to the lowest
        cell index.

        Returns:
            Cell center, or None if the patch has no prey-bearing cell left
        """
        patch = self.patches.get(patch_id)
        if patch is None:
            return None
        box = self._bounding_box(patch)
        if box is None:
            return None
        lo, hi = box

        window = tuple(slice(a, b) for a, b in zip(lo, hi))
        mask = (self._membership[window] == patch_id) & (self._prey[window] > 0)
        if not mask.any():
            return None

        centers = (np.argwhere(mask) + lo + 0.5) * self.cell_size
        d2 = ((centers - np.asarray(position, dtype=float)) ** 2).sum(axis=1)
        return centers[int(np.argmin(d2))]

    def patch_prey_sum(self, patch_id: int) -> float:
        """Sum of cell prey currently stamped with a patch id."""
        return float(self._prey[self._membership == patch_id].sum())

    def snapshot(self) -> np.ndarray:
        """Copy of the prey layer for heatmaps."""
        return self._prey.copy()
