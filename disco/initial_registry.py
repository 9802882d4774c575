"""Lookup of initial-data routines by setup kind."""

from __future__ import annotations

from typing import Callable, Sequence

from disco.cell import Cell, Domain, GravMass, InitialData, Mesh
from disco.initial_disk import (
    init_middle,
    init_milos_macfadyen,
    init_rad_dom,
    init_sstest,
    single_init_middle,
    single_init_milos_macfadyen,
    single_init_rad_dom,
    single_init_sstest,
)
from disco.initial_tests import (
    init_shear,
    init_torus,
    init_vortex,
    single_init_shear,
    single_init_torus,
    single_init_vortex,
)

GlobalInitializer = Callable[[Mesh, Sequence[GravMass], Domain], None]
SingleInitializer = Callable[[Cell, Mesh, Sequence[GravMass], int, int, int], None]

_GLOBAL: dict[InitialData, GlobalInitializer] = {
    InitialData.SHEAR: init_shear,
    InitialData.VORTEX: init_vortex,
    InitialData.TORUS: init_torus,
    InitialData.MILOS_MACFADYEN: init_milos_macfadyen,
    InitialData.RAD_DOM: init_rad_dom,
    InitialData.MIDDLE: init_middle,
    InitialData.SSTEST: init_sstest,
}

_SINGLE: dict[InitialData, SingleInitializer] = {
    InitialData.SHEAR: single_init_shear,
    InitialData.VORTEX: single_init_vortex,
    InitialData.TORUS: single_init_torus,
    InitialData.MILOS_MACFADYEN: single_init_milos_macfadyen,
    InitialData.RAD_DOM: single_init_rad_dom,
    InitialData.MIDDLE: single_init_middle,
    InitialData.SSTEST: single_init_sstest,
}


def global_initializer(kind: InitialData) -> GlobalInitializer:
    """Routine that fills a whole mesh with the initial data ``kind``."""
    try:
        return _GLOBAL[kind]
    except (KeyError, TypeError):
        raise ValueError(f"not a valid global initial data choice: {kind!r}") from None


def single_initializer(kind: InitialData) -> SingleInitializer:
    """Routine that sets one cell to the initial data ``kind``."""
    try:
        return _SINGLE[kind]
    except (KeyError, TypeError):
        raise ValueError(f"not a valid single point initial data choice: {kind!r}") from None