"""Conversion between primitive and conserved variables, and split fictitious forces."""

from __future__ import annotations

import math
from typing import Iterator, Sequence

from disco.cell import Cell, GravMass, Mesh, Params, Var


def prim_to_cons(prim: Sequence[float], r: float, dv: float, params: Params) -> list[float]:
    """Conserved quantities in a cell of volume ``dv`` at radius ``r``."""
    rho = prim[Var.RHO]
    pressure = prim[Var.PPP]
    vr = prim[Var.URR]
    vp = prim[Var.UPP] * r
    vz = prim[Var.UZZ]
    v2 = vr * vr + vp * vp + vz * vz
    rhoe = pressure / (params.gamma_law - 1.0)

    cons = [0.0] * params.num_q
    cons[Var.DDD] = rho * dv
    cons[Var.SRR] = rho * vr * dv
    cons[Var.LLL] = r * rho * vp * dv  # angular momentum, not linear
    cons[Var.SZZ] = rho * vz * dv
    cons[Var.TAU] = (0.5 * rho * v2 + rhoe) * dv
    for q in range(params.num_c, params.num_q):
        cons[q] = prim[q] * cons[Var.DDD]
    return cons


def cons_to_prim(cons: Sequence[float], r: float, dv: float, params: Params) -> list[float]:
    """Primitive variables with density, sound-speed and velocity limits applied."""
    gamma = params.gamma_law
    rho = max(cons[Var.DDD] / dv, params.rho_floor)
    sr = cons[Var.SRR] / dv
    sp = cons[Var.LLL] / dv / r
    sz = cons[Var.SZZ] / dv
    energy = cons[Var.TAU] / dv

    vr = sr / rho
    vp = sp / rho
    vz = sz / rho
    ke = 0.5 * (sr * vr + sp * vp + sz * vz)
    speed = math.sqrt(2.0 * ke / rho)

    pressure = (gamma - 1.0) * (energy - ke)
    p_floor = params.cs_floor * params.cs_floor * rho / gamma
    if pressure < p_floor:
        pressure = p_floor
    p_cap = params.cs_cap * params.cs_cap * rho / gamma
    if pressure > p_cap:
        pressure = p_cap
    if speed > params.vel_cap:
        scale = params.vel_cap / speed
        vr *= scale
        vp *= scale
        vz *= scale

    prim = [0.0] * params.num_q
    prim[Var.RHO] = rho
    prim[Var.PPP] = pressure
    prim[Var.URR] = vr
    prim[Var.UPP] = vp / r
    prim[Var.UZZ] = vz
    for q in range(params.num_c, params.num_q):
        prim[q] = cons[q] / cons[Var.DDD]
    return prim


def _cells_with_geometry(mesh: Mesh) -> Iterator[tuple[Cell, float, float]]:
    """Yield each cell with its central radius and volume."""
    grid = mesh.grid
    for k, plane in enumerate(mesh.cells):
        zm, zp = grid.z_bounds(k)
        dz = zp - zm
        for i, ring in enumerate(plane):
            rm, rp = grid.r_bounds(i)
            r = 0.5 * (rm + rp)
            for c in ring:
                yield c, r, 0.5 * (rp * rp - rm * rm) * c.dphi * dz


def calc_cons(mesh: Mesh) -> None:
    """Fill every cell's conserved array from its primitives."""
    for c, r, dv in _cells_with_geometry(mesh):
        c.cons = prim_to_cons(c.prim, r, dv, mesh.params)


def calc_prim(mesh: Mesh) -> None:
    """Fill every cell's primitive array from its conserved quantities."""
    for c, r, dv in _cells_with_geometry(mesh):
        c.prim = cons_to_prim(c.cons, r, dv, mesh.params)


def add_split_fictitious(mesh: Mesh, masses: Sequence[GravMass], dt: float) -> None:
    """Rotate radial and angular momentum exactly under the frame's epicyclic motion."""
    a = masses[0].r + masses[1].r
    params = mesh.params
    for c, r, _ in _cells_with_geometry(mesh):
        rom = params.frame_rom(r, a)
        omega = rom / r
        dr_r2om = 2.0 * rom + r * params.frame_rdrom(r, a)
        kappa2 = 2.0 * omega / r * dr_r2om
        if kappa2 <= 0.0:
            continue
        kappa = math.sqrt(kappa2)
        l0 = c.cons[Var.LLL]
        s0 = c.cons[Var.SRR]
        cos_kt = math.cos(kappa * dt)
        sin_kt = math.sin(kappa * dt)
        c.cons[Var.LLL] = l0 * cos_kt - s0 * dr_r2om / kappa * sin_kt
        c.cons[Var.SRR] = s0 * cos_kt + 2.0 * omega * l0 / r / kappa * sin_kt