"""Accumulated diagnostics and their periodic output."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

from disco.cell import Domain, Mesh

Gather = Callable[[Any], list]
"""Collect a value from every rank; returns the list of all ranks' values in rank order."""

NUM_DIAG = 16
_EQUATOR_TOL = 0.0000001


def _single_rank(value: Any) -> list:
    return [value]


@dataclass
class Diagnostics:
    """Time-averaged radial profiles, scalars and an equatorial snapshot."""

    n_p_global: list[int]
    offset_eq: int
    n_eq_cells: int
    dtdiag_measure: float
    tdiag_measure: float
    dtdiag_dump: float
    tdiag_dump: float
    toutprev: float
    toutprev_dump: float
    num_diag: int = NUM_DIAG
    equat: list[list[float]] = field(default_factory=list)
    vector: list[list[float]] = field(default_factory=list)
    scalar: list[float] = field(default_factory=list)

    @classmethod
    def from_mesh(
        cls,
        mesh: Mesh,
        domain: Domain,
        t: float,
        t_max: float,
        num_measure: int,
        num_dump: int,
        n_r_global: int,
        r_offset: int = 0,
        gather: Optional[Gather] = None,
    ) -> "Diagnostics":
        """Size the diagnostic tables for the mesh and schedule the first measurement and dump.

        ``r_offset`` is the global index of this patch's first non-ghost ring.
        """
        gather = gather or _single_rank
        grid = mesh.grid
        imin = grid.nghost_min[0]
        imax = grid.n_r - grid.nghost_max[0]
        kmin = grid.nghost_min[1]
        kmax = grid.n_z - grid.nghost_max[1]

        n_eq_local = 0
        for k in range(kmin, kmax):
            zm, zp = grid.z_bounds(k)
            z = 0.5 * (zm + zp)
            if abs(zp) < _EQUATOR_TOL or abs(z) < _EQUATOR_TOL:
                n_eq_local += sum(grid.n_phi[i] for i in range(imin, imax))

        counts = [int(c) for c in gather(n_eq_local)]
        offset_eq = sum(counts[: domain.rank])
        n_eq_cells = sum(counts)

        local_np = [0] * n_r_global
        top = 1 if domain.z_top else 0
        for i in range(imin, imax):
            local_np[r_offset + i - imin] = grid.n_phi[i] * top
        n_p_global = [sum(col) for col in zip(*gather(local_np))] if n_r_global else []

        dtdiag_measure = t_max / num_measure
        tdiag_measure = dtdiag_measure
        while tdiag_measure < t:
            tdiag_measure += dtdiag_measure
        dtdiag_dump = t_max / num_dump
        tdiag_dump = dtdiag_dump
        while tdiag_dump < t:
            tdiag_dump += dtdiag_dump

        return cls(
            n_p_global=n_p_global,
            offset_eq=offset_eq,
            n_eq_cells=n_eq_cells,
            dtdiag_measure=dtdiag_measure,
            tdiag_measure=tdiag_measure,
            dtdiag_dump=dtdiag_dump,
            tdiag_dump=tdiag_dump,
            toutprev=t,
            toutprev_dump=t,
            equat=[[0.0] * (NUM_DIAG + 2) for _ in range(n_eq_cells)],
            vector=[[0.0] * (NUM_DIAG + 1) for _ in range(n_r_global)],
            scalar=[0.0] * NUM_DIAG,
        )

    def write(self, t: float, directory: Union[str, Path] = ".", is_root: bool = True) -> bool:
        """Write the averages if a dump is due, then reset them; return whether one was due.

        Radial profiles go to ``DiagVector_<t>.dat``, scalars are appended to
        ``DiagScalar.dat`` and the equatorial table goes to ``DiagEquat_<t>.dat``.
        Only the root rank writes, but every rank resets.
        """
        if not t > self.tdiag_dump:
            return False
        dt_dump = t - self.toutprev_dump
        if is_root:
            out = Path(directory)
            stamp = "%010.2f" % t
            with open(out / f"DiagVector_{stamp}.dat", "w") as fh:
                for row in self.vector:
                    fh.write("".join("%e " % (v / dt_dump) for v in row) + "\n")
            with open(out / "DiagScalar.dat", "a") as fh:
                fh.write("%e " % t)
                fh.write("".join("%e " % (v / dt_dump) for v in self.scalar) + "\n")
            with open(out / f"DiagEquat_{stamp}.dat", "w") as fh:
                for row in self.equat:
                    fh.write("".join("%e " % v for v in row) + "\n")

        self.toutprev_dump = t
        self.vector = [[0.0] * (self.num_diag + 1) for _ in self.vector]
        self.scalar = [0.0] * self.num_diag
        self.tdiag_dump += self.dtdiag_dump
        return True