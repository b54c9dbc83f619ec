"""Numba-compiled DDA loop for materializing a whole cell path at once."""

import numpy as np
from numba import njit


@njit(cache=True)
def _walk_cells(
    cell: np.ndarray,
    t_max: np.ndarray,
    t_delta: np.ndarray,
    step: np.ndarray,
    cell_count: np.ndarray,
    out_cells: np.ndarray,
    out_t: np.ndarray,
    t_start: float
) -> int:
    """Step through the grid, filling pre-allocated buffers.

    Uses the same recurrence and X/Y/Z tie-break as TraversalState.advance.
    Returns the number of cells written.
    """
    vx, vy, vz = cell[0], cell[1], cell[2]
    tx, ty, tz = t_max[0], t_max[1], t_max[2]
    current_t = t_start

    n = 0
    while n < out_cells.shape[0]:
        if vx < 0 or vx >= cell_count[0] or \
           vy < 0 or vy >= cell_count[1] or \
           vz < 0 or vz >= cell_count[2]:
            break

        out_cells[n, 0] = vx
        out_cells[n, 1] = vy
        out_cells[n, 2] = vz
        out_t[n] = current_t
        n += 1

        if tx <= ty and tx <= tz:
            current_t = tx
            tx += t_delta[0]
            vx += step[0]
        elif ty <= tz:
            current_t = ty
            ty += t_delta[1]
            vy += step[1]
        else:
            current_t = tz
            tz += t_delta[2]
            vz += step[2]

    return n


def walk_cells(state, cell_count: np.ndarray):
    """Run the compiled DDA loop from an initial traversal state.

    Args:
        state: TraversalState from begin_traversal (left unmodified)
        cell_count: Per-axis cell counts of the grid

    Returns:
        Tuple of (cells, t_enter): an (N, 3) int64 array of visited cells in
        ray order and the (N,) distances at which each cell is entered
    """
    cell_count = np.asarray(cell_count, dtype=np.int64)

    # Each step moves one axis monotonically, so a path visits at most
    # sum(cell_count) - 2 cells
    max_cells = int(cell_count.sum())
    out_cells = np.empty((max_cells, 3), dtype=np.int64)
    out_t = np.empty(max_cells, dtype=np.float64)

    n = _walk_cells(
        state.cell.astype(np.int64),
        state.t_max.astype(np.float64),
        state.t_delta.astype(np.float64),
        state.step.astype(np.int64),
        cell_count,
        out_cells,
        out_t,
        float(state.t),
    )
    return out_cells[:n], out_t[:n]
