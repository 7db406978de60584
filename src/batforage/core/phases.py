"""
Per-step phase functions.

A step runs these phases in order, each a sequential sweep over living
bats in creation order:

1. regenerate_if_new_day - rebuild patches and prey at day start
2. count_occupancy      - zero and recount patch occupancy
3. resolve_states       - state machine and patch selection
4. move_bats            - target seeking with repulsion and collision
5. update_energy        - metabolic loss and foraging gain

Later bats in a sweep observe the positions and prey already changed by
earlier ones.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict

from batforage.behavior.decision import select_patch
from batforage.behavior.states import BatState
from batforage.landscape.resource_field import UNASSIGNED
from batforage.movement.repulsion import MoveOutcome, step_position
from batforage.physiology.energy_budget import apply_energy_update

if TYPE_CHECKING:
    from batforage.agents.bat import Bat
    from batforage.core.context import SimulationContext

logger = logging.getLogger("batforage.core.phases")


@dataclass
class StepReport:
    """Counters gathered while running the phases of one step."""
    regenerated: bool = False
    deaths: int = 0
    moves: Dict[MoveOutcome, int] = field(default_factory=dict)
    metabolic_cost: float = 0.0
    prey_consumed: float = 0.0


def regenerate_if_new_day(ctx: SimulationContext) -> bool:
    """Rebuild the patch registry and prey field if a new day starts."""
    if not ctx.clock.is_new_day:
        return False
    p = ctx.params
    ctx.field.regenerate(
        p.n_patches,
        ctx.rng,
        radius_range=p.patch_radius_range,
        prey_range=p.patch_prey_range,
        capacity_range=p.patch_capacity_range,
    )
    logger.info(
        "Day %d: regenerated %d patches with %.1f total prey",
        ctx.clock.day, len(ctx.patches), ctx.patches.total_prey,
    )
    return True


def count_occupancy(ctx: SimulationContext) -> int:
    """
    Recompute patch occupancy from the current bat positions.

    Roosting bats are not resident in any patch.

    Returns:
        Number of bats counted into a patch
    """
    ctx.field.occupancy_reset()
    counted = 0
    for bat in ctx.population.living():
        if bat.state is BatState.ROOSTING:
            continue
        patch_id = ctx.field.patch_at(bat.position)
        if patch_id != UNASSIGNED:
            ctx.patches.record_presence(patch_id)
            counted += 1
    return counted


def resolve_state(bat: Bat, ctx: SimulationContext) -> BatState:
    """
    Apply the transition rules to one living bat.

    Rules in priority order:
    1. calories at or below the death threshold -> DEAD
    2. full -> RETURNING to the origin roost
    3. inside the return window -> RETURNING to the origin roost
    4. roost hours -> ROOSTING, snapped to the roost, memory decays
    5. otherwise FORAGING: stay on a prey-bearing cell, else fly to the
       patch chosen by the decision policy (its nearest prey-bearing cell
       when the bat already sits at the center), else go home
    """
    params = ctx.params
    clock = ctx.clock

    if bat.calories <= params.death_threshold:
        ctx.population.kill(bat, clock.step)
        return BatState.DEAD

    if bat.calories >= bat.max_calories or clock.in_return_window:
        bat.head_home()
        return bat.state

    if clock.is_roost_hours:
        bat.set_state(BatState.ROOSTING, target=bat.roost)
        ctx.population.relocate(bat, bat.roost)
        bat.memory.decay_all()
        return bat.state

    if ctx.field.is_prey_bearing(bat.position):
        patch_id = ctx.field.patch_at(bat.position)
        bat.set_state(BatState.FORAGING, target=bat.position, patch_id=patch_id)
        return bat.state

    patch_id = select_patch(bat, ctx.patches, ctx.rng)
    if patch_id is None:
        bat.head_home()
        return bat.state

    target = ctx.patches.get(patch_id).center
    if bat.is_at(target, params.tolerance):
        # Already at the center of a patch whose center cell is exhausted
        target = ctx.field.nearest_prey_cell(bat.position, patch_id)
        if target is None:
            bat.head_home()
            return bat.state
    bat.set_state(BatState.FORAGING, target=target, patch_id=patch_id)
    return bat.state


def resolve_states(ctx: SimulationContext) -> int:
    """
    Run the state machine over every living bat.

    Returns:
        Number of bats that died this step
    """
    deaths = 0
    for bat in list(ctx.population.living()):
        if resolve_state(bat, ctx) is BatState.DEAD:
            deaths += 1
    return deaths


def move_bats(ctx: SimulationContext) -> Dict[MoveOutcome, int]:
    """Move every living, non-roosting bat that has not reached its target."""
    params = ctx.params
    outcomes: Counter = Counter()
    for bat in ctx.population.living():
        if bat.state is BatState.ROOSTING:
            continue
        if bat.is_at(bat.target, params.tolerance):
            continue
        outcome = step_position(
            bat,
            ctx.population.grid,
            step_size=params.step_size,
            repulsion_radius=params.repulsion_radius,
            tolerance=params.tolerance,
            roost_sites=ctx.roost_sites,
            bounds=params.domain_size,
        )
        outcomes[outcome] += 1
    return dict(outcomes)


def update_energy(ctx: SimulationContext) -> StepReport:
    """Apply metabolic loss and foraging gain to every living bat."""
    report = StepReport()
    for bat in ctx.population.living():
        result = apply_energy_update(bat, ctx.field, ctx.params, ctx.rng)
        report.metabolic_cost += result.cost
        report.prey_consumed += result.gain
    return report


def run_step(ctx: SimulationContext) -> StepReport:
    """Advance the clock and run every phase once."""
    ctx.clock.advance()
    regenerated = regenerate_if_new_day(ctx)
    count_occupancy(ctx)
    deaths = resolve_states(ctx)
    moves = move_bats(ctx)
    report = update_energy(ctx)
    report.regenerated = regenerated
    report.deaths = deaths
    report.moves = moves
    if deaths:
        logger.debug("Step %d: %d bats starved", ctx.clock.step, deaths)
    return report
