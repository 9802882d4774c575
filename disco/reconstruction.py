"""Piecewise-linear slope reconstruction in the azimuthal and r/z directions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from disco.cell import PHIMAX, Cell, Direction, Domain, Mesh


def _wrap_half(angle: float) -> float:
    """Bring an angle difference into [-PHIMAX/2, PHIMAX/2]."""
    while angle > PHIMAX / 2.0:
        angle -= PHIMAX
    while angle < -PHIMAX / 2.0:
        angle += PHIMAX
    return angle


@dataclass
class Face:
    """A face between two cells in the r or z direction.

    ``delta_l`` and ``delta_r`` are the distances from the face to the centres
    of its left and right cells, ``phi`` is the azimuthal centre of the face,
    ``area`` its area and ``r`` its radius.
    """

    left: Cell
    right: Cell
    delta_l: float
    delta_r: float
    phi: float
    area: float
    r: float

    def slopes(self) -> list[float]:
        """Slope of every primitive across the face, using azimuthal gradients."""
        cl, cr = self.left, self.right
        dpl = _wrap_half(self.phi - (cl.tiph - 0.5 * cl.dphi))
        dpr = _wrap_half((cr.tiph - 0.5 * cr.dphi) - self.phi)
        width = self.delta_l + self.delta_r
        return [
            ((pr - dpr * gr) - (pl + dpl * gl)) / width
            for pl, gl, pr, gr in zip(cl.prim, cl.gradp, cr.prim, cr.gradp)
        ]


def _limit(slope: float, current: float, plm: float) -> float:
    if slope * current < 0.0:
        return 0.0
    if abs(plm * slope) < abs(current):
        return plm * slope
    return current


def plm_rz(mesh: Mesh, faces: Iterable[Face], direction: Direction, domain: Domain) -> None:
    """Set each cell's ``grad`` from area-weighted face slopes, then limit them."""
    grid = mesh.grid
    plm = mesh.params.plm
    for _, _, _, c in mesh.iter_cells():
        c.grad = [0.0] * len(c.prim)

    face_slopes = [(face, face.slopes()) for face in faces]
    for face, slopes in face_slopes:
        face.left.grad = [g + s * face.area for g, s in zip(face.left.grad, slopes)]
        face.right.grad = [g + s * face.area for g, s in zip(face.right.grad, slopes)]

    n_r = grid.n_r
    for k, plane in enumerate(mesh.cells):
        zm, zp = grid.z_bounds(k)
        dz = zp - zm
        for i, ring in enumerate(plane):
            rm, rp = grid.r_bounds(i)
            for c in ring:
                dp = c.dphi
                if direction == Direction.R:
                    if domain.r_inner and i == 0:
                        total = dz * rp * dp
                    elif domain.r_outer and i == n_r - 1:
                        total = dz * rm * dp
                    else:
                        total = dz * (rp + rm) * dp
                else:
                    total = (rp * rp - rm * rm) * dp
                c.grad = [g / total for g in c.grad]

    for face, slopes in face_slopes:
        cl, cr = face.left, face.right
        for q, s in enumerate(slopes):
            cl.grad[q] = _limit(s, cl.grad[q], plm)
            cr.grad[q] = _limit(s, cr.grad[q], plm)


def plm_phi(mesh: Mesh) -> None:
    """Set each cell's limited azimuthal gradient ``gradp`` from its ring neighbours."""
    plm = mesh.params.plm
    for plane in mesh.cells:
        for ring in plane:
            n = len(ring)
            for j, c in enumerate(ring):
                cl = ring[j - 1]
                cr = ring[(j + 1) % n]
                dpl = 0.5 * (c.dphi + cl.dphi)
                dpr = 0.5 * (c.dphi + cr.dphi)
                gradp = []
                for pc, pl, pr in zip(c.prim, cl.prim, cr.prim):
                    sl = (pc - pl) / dpl
                    sr = (pr - pc) / dpr
                    sm = (pr - pl) / (dpl + dpr)
                    s = plm * sl
                    if abs(s) > plm * abs(sr):
                        s = plm * sr
                    if abs(s) > abs(sm):
                        s = sm
                    if sl * sr < 0.0:
                        s = 0.0
                    gradp.append(s)
                c.gradp = gradp