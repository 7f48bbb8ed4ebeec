"""API routes for the X-Wing simulator."""

from typing import Any, Dict, List, Optional
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from ..actions import ACTIONS
from ..config import SimulationSettings
from ..main import simulate
from ..rosters import get_registry
from ..simulators.match import DEFAULT_ROUND_CAP
from ..simulators.trials import DEFAULT_TRIALS, DEFAULT_WORKERS

router = APIRouter()

MAX_TRIALS = 100_000


# Request/Response models
class SimulateRequest(BaseModel):
    roster: str = "default"
    trials: int = Field(DEFAULT_TRIALS, ge=1, le=MAX_TRIALS)
    seed: Optional[int] = None
    action: str = "focus"
    workers: int = Field(DEFAULT_WORKERS, ge=1, le=64)
    round_cap: int = Field(DEFAULT_ROUND_CAP, ge=1)


class ShipInfo(BaseModel):
    name: str
    side: str
    skill: int
    attack: int
    defense: int
    hull: int
    shields: int
    grants_squad_reroll: bool


class RosterInfo(BaseModel):
    name: str
    description: str
    labels: Dict[str, str]
    ships: List[ShipInfo]


@router.get("/rosters")
def list_rosters() -> List[RosterInfo]:
    """List the built-in rosters."""
    out = []
    for name, roster in sorted(get_registry().all_rosters().items()):
        ships = [
            ShipInfo(
                name=t.name,
                side=t.faction.value,
                skill=t.skill,
                attack=t.attack,
                defense=t.defense,
                hull=t.hull,
                shields=t.shields,
                grants_squad_reroll=t.grants_squad_reroll,
            )
            for t in roster.templates()
        ]
        out.append(
            RosterInfo(
                name=name,
                description=roster.description,
                labels={f.value: label for f, label in roster.labels.items()},
                ships=ships,
            )
        )
    return out


@router.post("/simulate")
def run_simulation(request: SimulateRequest) -> Dict[str, Any]:
    """Play a batch of matches and return the tallies.

    Only built-in roster names are accepted here; file paths are a CLI feature.
    """
    if request.roster not in get_registry().all_rosters():
        raise HTTPException(status_code=404, detail=f"Roster '{request.roster}' not found")
    if request.action not in ACTIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown action '{request.action}'. Available: {', '.join(sorted(ACTIONS))}",
        )
    settings = SimulationSettings(
        trials=request.trials,
        seed=request.seed,
        action=request.action,
        roster=request.roster,
        workers=request.workers,
        round_cap=request.round_cap,
    )
    run = simulate(settings)
    return run.summary.to_dict()
