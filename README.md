# disco

`disco` provides the building blocks of a moving-mesh hydrodynamics scheme on a
cylindrical (r, φ, z) grid. It is aimed at discs around a binary of point
masses. Each radial ring of cells carries its own azimuthal face angles. These
angles advance with a face velocity and with a rotating frame, so the cells
follow the flow around the binary.

The package is written in pure Python and depends only on the standard library.

## Modules

### `disco.cell`

This module holds the mesh and the parameters.

- `Params` holds the physical and numerical parameters. These include:
  - the adiabatic index;
  - floors and caps on density, sound speed and velocity;
  - the PLM limiter and the CFL number;
  - the viscosity, softening and gravity options;
  - the sink and cooling switches;
  - the damping zones;
  - the boundary switches.

  It also takes three frame functions of `(r, a)`: `frame_rom`, `frame_rdrom` and `frame_dtom`. By default these describe a non-rotating frame.
- `Grid` holds the radial and vertical face positions, the number of cells in each ring (`n_phi`) and the ghost-zone counts. It offers:
  - `face_pos`, which gives the position of a face;
  - `r_bounds` and `z_bounds`, which give the edges of a cell.
- `Domain` gives where the local patch sits in a decomposed domain: its rank, and which global boundaries it touches.
- `GravMass` is a point mass in the equatorial plane. It has a `dist` method.
- `Cell` holds the state of one cell: primitive, conserved, stored Runge–Kutta, gradient, face angle, width, face velocity and cooling.
- `Mesh` holds `cells[k][i][j]`. Its methods are:
  - `cell` and `iter_cells`, which give access to cells;
  - `wrap_phi`, which brings face angles back into range;
  - `copy_to_rk`, `blend_rk_cons` and `update_phi`, which store, blend and advance state during Runge–Kutta steps;
  - `update_dphi`, which recomputes cell widths;
  - `damp_boundaries`, which relaxes the damping zones towards initial data;
  - `clear_w`, which sets every face velocity to zero.
- `create_mesh(grid, params, seed)` builds a zeroed mesh in which every ring starts at a random azimuthal offset.
- `Var`, `Direction` and `InitialData` are the enumerations of variable indices, directions and set-ups.

### `disco.conversion`

- `prim_to_cons` and `cons_to_prim` convert between primitive and conserved variables. `cons_to_prim` applies the floors and caps.
- `calc_cons` and `calc_prim` apply these conversions to the whole mesh.
- `add_split_fictitious` rotates the radial and angular momentum exactly under the epicyclic motion of the frame.

### `disco.reconstruction`

- `plm_phi` computes limited azimuthal gradients for each ring.
- `Face` describes a face between two cells in r or z. `plm_rz` computes limited r or z gradients from a list of such faces.

### `disco.timestep`

- `max_signal_speed` gives the fastest signal speed in a cell.
- `min_dt` gives the CFL time step over the cells that are not ghosts. It includes the explicit-viscosity limit when viscosity is switched on.

### `disco.boundary`

- `outflow_r` and `outflow_z` fill boundary rings and layers with area-weighted copies of their neighbours. Both take the face list and the per-ring face offsets.
- `fixed_r` and `fixed_z` reset ghost cells with a single-cell initializer.

### `disco.sources`

- Gravity of the point masses: `fgrav` and `grav_mass_force`.
- `add_sources` adds:
  - gravity;
  - frame terms;
  - density sinks, with `rho_sink_rate`, recording accretion rates on the masses;
  - cooling.
- `add_visc_source` and `add_visc_source_old` add viscous heating and radial drag.

### `disco.sync`

- `buffer_size`, `pack_cells` and `unpack_cells` move blocks of rings to and from flat lists.
- `sync_r` and `sync_z` swap ghost zones through an `exchange` callable that you supply.

### Initial data

- `disco.initial_disk` holds the disc set-ups: `sstest`, `middle`, `milos_macfadyen` and `rad_dom`.
- `disco.initial_tests` holds the test problems: `shear`, `torus` and `vortex`.

Each set-up comes in two forms. The `init_*` form fills the whole mesh. The `single_init_*` form sets one cell.

`disco.initial_registry` has `global_initializer(kind)` and `single_initializer(kind)`, which select a set-up by its `InitialData` value.

### Diagnostics

`disco.diagnostics.Diagnostics` collects time-averaged radial profiles, volume-averaged scalars and an equatorial table.

- `Diagnostics.from_mesh` sizes these tables and schedules the first measurement and the first dump.
- `Diagnostics.write(t, directory, is_root)` writes the output when a dump is due, then resets the averages. It writes three files:
  - `DiagVector_<t>.dat`;
  - `DiagScalar.dat`, which it appends to;
  - `DiagEquat_<t>.dat`.

`disco.diagnostics_measure.measure` adds a measurement when one is due. It also appends accretion figures to `DiagMdot.dat`.

## Example

```python
import math

from disco.cell import Domain, GravMass, Grid, InitialData, Params, create_mesh
from disco.conversion import calc_cons
from disco.initial_registry import global_initializer
from disco.timestep import min_dt

grid = Grid(
    r_faces=[0.5 + 0.1 * n for n in range(11)],
    z_faces=[-0.5, 0.5],
    n_phi=[32] * 10,
)
params = Params(initial_data=InitialData.SHEAR)
mesh = create_mesh(grid, params, seed=0)
masses = [GravMass(mass=0.5, r=0.5, phi=0.0), GravMass(mass=0.5, r=0.5, phi=math.pi)]
domain = Domain()

global_initializer(params.initial_data)(mesh, masses, domain)
calc_cons(mesh)
dt = min_dt(mesh, masses)
```

## Single process by default

Some steps combine values across processes:

- `min_dt`, `add_sources` and `measure` take an optional `reduce` callable.
- `Diagnostics.from_mesh` takes an optional `gather` callable.
- `sync_r` and `sync_z` take an `exchange` callable.

When these callables are left out, the package works on one patch alone.

## What the package does not do

The package is a set of components, not a complete simulation. It has:

- no command or driver loop that runs a simulation;
- no Riemann solver or flux computation;
- no builder for the `Face` list that reconstruction and outflow boundaries need;
- no routine that sets face velocities from the flow.

You set face velocities yourself, either directly or through the initial data, or you clear them with `Mesh.clear_w`.

The package has no message-passing layer of its own.

All output is plain text. The package does not write HDF5.

## Installation

```
pip install .
pip install ".[test]"   # with pytest
```

## Tests

```
pytest
```