"""Cell storage for a moving-mesh cylindrical grid and whole-mesh updates."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Callable, Iterator, Optional, Sequence

PHIMAX = 2.0 * math.pi

FrameFunction = Callable[[float, float], float]
SingleInitializer = Callable[..., None]


class Var(IntEnum):
    """Indices into primitive and conserved variable arrays."""

    RHO = 0
    PPP = 1
    URR = 2
    UPP = 3
    UZZ = 4
    DDD = 0
    TAU = 1
    SRR = 2
    LLL = 3
    SZZ = 4


class Direction(IntEnum):
    """Grid directions that carry face positions."""

    R = 0
    Z = 1


class InitialData(Enum):
    """Available initial-data setups."""

    SHEAR = "shear"
    VORTEX = "vortex"
    TORUS = "torus"
    MILOS_MACFADYEN = "milos_macfadyen"
    RAD_DOM = "rad_dom"
    MIDDLE = "middle"
    SSTEST = "sstest"


def _static_frame(r: float, a: float) -> float:
    """Frame term of a non-rotating frame: zero at every radius."""
    return 0.0 * r


@dataclass
class Params:
    """Physical and numerical parameters of a run."""

    gamma_law: float = 5.0 / 3.0
    cs_floor: float = 0.0
    cs_cap: float = math.inf
    rho_floor: float = 0.0
    vel_cap: float = math.inf
    num_q: int = 5
    num_c: int = 5
    plm: float = 1.5
    cfl: float = 0.5
    explicit_viscosity: float = 0.0
    visc_const: bool = True
    g_eps: float = 0.0
    phi_order: int = 2
    grav2d: bool = True
    num_grav_mass: int = 2
    grav_mass_type: int = 2
    rho_sink_on: bool = False
    cooling: bool = False
    initial_data: InitialData = InitialData.SHEAR
    po_rho_r1: float = 0.01
    mass_ratio: float = 1.0
    damp_time: float = 1.0
    rdamp_inner: float = 0.0
    rdamp_outer: float = math.inf
    no_inner_bc: bool = False
    w_a_milos_index: float = 1.5
    ss_bcs: bool = False
    extrap_bc: float = 0.0
    diode: bool = False
    kep_boundary: bool = False
    no_w_in_cfl: bool = False
    tvisc_fac: float = 1.0
    frame_rom: FrameFunction = _static_frame
    frame_rdrom: FrameFunction = _static_frame
    frame_dtom: FrameFunction = _static_frame

    def __post_init__(self) -> None:
        if self.num_q < 5:
            raise ValueError("num_q must be at least 5")
        if not 5 <= self.num_c <= self.num_q:
            raise ValueError("num_c must lie between 5 and num_q")


@dataclass
class Grid:
    """Face positions in r and z plus the number of azimuthal cells per ring."""

    r_faces: Sequence[float]
    z_faces: Sequence[float]
    n_phi: Sequence[int]
    nghost_min: tuple[int, int] = (0, 0)
    nghost_max: tuple[int, int] = (0, 0)
    n_z_global: Optional[int] = None
    rmin: Optional[float] = None
    rmax: Optional[float] = None
    zmin: Optional[float] = None
    zmax: Optional[float] = None

    def __post_init__(self) -> None:
        self.r_faces = tuple(float(x) for x in self.r_faces)
        self.z_faces = tuple(float(x) for x in self.z_faces)
        self.n_phi = tuple(int(n) for n in self.n_phi)
        self.nghost_min = tuple(self.nghost_min)
        self.nghost_max = tuple(self.nghost_max)
        if len(self.r_faces) < 2 or len(self.z_faces) < 2:
            raise ValueError("a grid needs at least one cell in r and z")
        if len(self.r_faces) != len(self.n_phi) + 1:
            raise ValueError("n_phi must give one count per radial cell")
        if any(n < 1 for n in self.n_phi):
            raise ValueError("every ring needs at least one azimuthal cell")
        if self.n_z_global is None:
            self.n_z_global = self.n_z
        if self.rmin is None:
            self.rmin = self.r_faces[0]
        if self.rmax is None:
            self.rmax = self.r_faces[-1]
        if self.zmin is None:
            self.zmin = self.z_faces[0]
        if self.zmax is None:
            self.zmax = self.z_faces[-1]

    @property
    def n_r(self) -> int:
        return len(self.r_faces) - 1

    @property
    def n_z(self) -> int:
        return len(self.z_faces) - 1

    def face_pos(self, index: int, direction: Direction) -> float:
        """Position of the outer face of cell ``index``; ``-1`` is the first face."""
        faces = self.r_faces if direction == Direction.R else self.z_faces
        pos = index + 1
        if not 0 <= pos < len(faces):
            raise IndexError(f"face {index} outside the grid")
        return faces[pos]

    def r_bounds(self, i: int) -> tuple[float, float]:
        """Inner and outer radius of ring ``i``."""
        return self.face_pos(i - 1, Direction.R), self.face_pos(i, Direction.R)

    def z_bounds(self, k: int) -> tuple[float, float]:
        """Lower and upper height of layer ``k``."""
        return self.face_pos(k - 1, Direction.Z), self.face_pos(k, Direction.Z)


@dataclass
class Domain:
    """Position of the local patch within a decomposed domain."""

    rank: int = 0
    num_procs: int = 1
    r_inner: bool = True
    r_outer: bool = True
    z_bottom: bool = True
    z_top: bool = True


@dataclass
class GravMass:
    """A point mass in the equatorial plane."""

    mass: float
    r: float
    phi: float
    mdot: float = 0.0
    macc: float = 0.0

    def dist(self, r: float, phi: float, z: float) -> float:
        """Distance from the point (r, phi, z) to this mass."""
        d2 = r * r + self.r * self.r - 2.0 * r * self.r * math.cos(phi - self.phi) + z * z
        return math.sqrt(max(d2, 0.0))


@dataclass
class Cell:
    """State of one cell; arrays default to zeros sized like ``prim``."""

    prim: list[float]
    cons: list[float] = field(default_factory=list)
    rk_cons: list[float] = field(default_factory=list)
    grad: list[float] = field(default_factory=list)
    gradp: list[float] = field(default_factory=list)
    tiph: float = 0.0
    rk_tiph: float = 0.0
    dphi: float = 0.0
    wiph: float = 0.0
    cool: float = 0.0

    def __post_init__(self) -> None:
        n = len(self.prim)
        self.prim = list(self.prim)
        for name in ("cons", "rk_cons", "grad", "gradp"):
            if not getattr(self, name):
                setattr(self, name, [0.0] * n)


@dataclass
class Mesh:
    """All cells of the local patch, stored as ``cells[k][i][j]``."""

    grid: Grid
    params: Params
    cells: list[list[list[Cell]]]

    def cell(self, i: int, j: int, k: int) -> Cell:
        return self.cells[k][i][j]

    def iter_cells(self) -> Iterator[tuple[int, int, int, Cell]]:
        """Yield ``(i, j, k, cell)`` in k, i, j order."""
        for k, plane in enumerate(self.cells):
            for i, ring in enumerate(plane):
                for j, c in enumerate(ring):
                    yield i, j, k, c

    def _radius(self, i: int) -> float:
        rm, rp = self.grid.r_bounds(i)
        return 0.5 * (rm + rp)

    def wrap_phi(self) -> None:
        """Bring every cell's face angle into [0, PHIMAX]."""
        for _, _, _, c in self.iter_cells():
            phi = c.tiph
            while phi > PHIMAX:
                phi -= PHIMAX
            while phi < 0.0:
                phi += PHIMAX
            c.tiph = phi

    def copy_to_rk(self) -> None:
        """Store the current conserved state and face angles for Runge-Kutta."""
        for _, _, _, c in self.iter_cells():
            c.rk_cons = list(c.cons)
            c.rk_tiph = c.tiph

    def blend_rk_cons(self, rk: float) -> None:
        """Mix the stored state into the current one with weight ``rk``."""
        for _, _, _, c in self.iter_cells():
            c.cons = [(1.0 - rk) * u + rk * v for u, v in zip(c.cons, c.rk_cons)]

    def update_phi(self, rk: float, dt: float, separation: float) -> None:
        """Blend and advance face angles by the face velocity plus frame rotation."""
        for i, _, _, c in self.iter_cells():
            r = self._radius(i)
            while c.tiph - c.rk_tiph > PHIMAX / 2.0:
                c.rk_tiph += PHIMAX
            while c.tiph - c.rk_tiph < -PHIMAX / 2.0:
                c.rk_tiph -= PHIMAX
            c.tiph = (1.0 - rk) * c.tiph + rk * c.rk_tiph
            w_total = c.wiph + self.params.frame_rom(r, separation)
            c.tiph += w_total * dt / r

    def update_dphi(self) -> None:
        """Recompute each cell's width from its neighbour's face angle."""
        for plane in self.cells:
            for ring in plane:
                for j, c in enumerate(ring):
                    dphi = c.tiph - ring[j - 1].tiph
                    while dphi > PHIMAX:
                        dphi -= PHIMAX
                    while dphi < 0.0:
                        dphi += PHIMAX
                    c.dphi = dphi

    def damp_boundaries(
        self, dt: float, initializer: SingleInitializer, masses: Sequence[GravMass]
    ) -> None:
        """Relax primitives in the damping zones towards the initial state."""
        p = self.params
        r0 = 1.0 / p.damp_time / 2.0 / math.pi
        for i in range(self.grid.n_r):
            r = self._radius(i)
            if not (r < p.rdamp_inner or r > p.rdamp_outer):
                continue
            if r > p.rdamp_outer:
                rate = r0 * (r - p.rdamp_outer) / (self.grid.rmax - p.rdamp_outer)
            else:
                rate = r0 * (r - p.rdamp_inner) / (self.grid.rmin - p.rdamp_inner)
            factor = 1.0 - math.exp(-rate * dt)
            for k, plane in enumerate(self.cells):
                for j, c in enumerate(plane[i]):
                    target = Cell(prim=list(c.prim), tiph=c.tiph, dphi=c.dphi, wiph=c.wiph)
                    initializer(target, self, masses, i, j, k)
                    c.prim = [
                        value + factor * (goal - value)
                        for value, goal in zip(c.prim, target.prim)
                    ]

    def clear_w(self) -> None:
        """Set every face velocity to zero."""
        for _, _, _, c in self.iter_cells():
            c.wiph = 0.0


def create_mesh(grid: Grid, params: Params, seed: int = 666) -> Mesh:
    """Build a zeroed mesh whose rings start at random azimuthal offsets."""
    rng = random.Random(seed)
    cells: list[list[list[Cell]]] = []
    for _ in range(grid.n_z):
        plane: list[list[Cell]] = []
        for n in grid.n_phi:
            tiph0 = PHIMAX * rng.random()
            dphi = PHIMAX / n
            plane.append(
                [
                    Cell(
                        prim=[0.0] * params.num_q,
                        tiph=tiph0 + j * dphi,
                        rk_tiph=tiph0 + j * dphi,
                        dphi=dphi,
                    )
                    for j in range(n)
                ]
            )
        cells.append(plane)
    return Mesh(grid=grid, params=params, cells=cells)