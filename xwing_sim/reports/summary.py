from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional, Tuple
from datetime import datetime, timezone
import json

from ..ships import Faction
from ..simulators.trials import AggregateResult

@dataclass
class SideDiag:
    label: str
    wins: int
    win_rate: float
    survivors: List[Tuple[int, int]]

@dataclass
class RunSummary:
    timestamp: str
    roster: str
    seed: Optional[int]
    trials: int
    action: str
    round_cap: int
    side_a: SideDiag
    side_b: SideDiag
    draws: int
    draw_rate: float
    capped: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=False)

    def to_markdown(self) -> str:
        lines = []
        lines.append(f"# X-Wing Simulation Report ({self.roster})")
        lines.append(f"- **Timestamp:** {self.timestamp}")
        lines.append(f"- **Seed:** {self.seed}  |  **Trials:** {self.trials}  |  **Action:** {self.action}  |  **Round cap:** {self.round_cap}")
        lines.append("\n## Outcomes")
        lines.append("| Side | Wins | Rate |")
        lines.append("| --- | ---: | ---: |")
        for side in (self.side_a, self.side_b):
            lines.append(f"| {side.label} | {side.wins} | {side.win_rate:.1%} |")
        lines.append(f"| Draw | {self.draws} | {self.draw_rate:.1%} |")
        if self.capped:
            lines.append(f"\n{self.capped} draws were forced by the round cap.")
        for side in (self.side_a, self.side_b):
            if side.survivors:
                lines.append(f"\n## {side.label} survivors when winning")
                for remaining, count in side.survivors:
                    lines.append(f"- {remaining} ships: {count}")
        return "\n".join(lines)

def _side(label: str, aggregate: AggregateResult, faction: Faction) -> SideDiag:
    counter = aggregate.side_a_survivors if faction is Faction.SIDE_A else aggregate.side_b_survivors
    return SideDiag(
        label=label,
        wins=aggregate.wins(faction),
        win_rate=aggregate.win_rate(faction),
        survivors=sorted(counter.items()),
    )

def build_summary(
    roster_name: str,
    labels: Dict[Faction, str],
    aggregate: AggregateResult,
    seed: Optional[int],
    action: str,
    round_cap: int,
) -> RunSummary:
    timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")
    return RunSummary(
        timestamp=timestamp,
        roster=roster_name,
        seed=seed,
        trials=aggregate.trials,
        action=action,
        round_cap=round_cap,
        side_a=_side(labels.get(Faction.SIDE_A, "Side A"), aggregate, Faction.SIDE_A),
        side_b=_side(labels.get(Faction.SIDE_B, "Side B"), aggregate, Faction.SIDE_B),
        draws=aggregate.draws,
        draw_rate=aggregate.draw_rate(),
        capped=aggregate.capped,
    )
