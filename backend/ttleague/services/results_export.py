"""
CSV export of completed matches, one row per match, oldest result first.
"""
import csv
import io
from typing import Iterable, Optional

from ttleague.models.match import Match
from ttleague.models.player import Player

CSV_HEADERS = [
    "Match ID",
    "Phase",
    "Player 1",
    "Player 1 Department",
    "Player 1 Tier",
    "Player 2",
    "Player 2 Department",
    "Player 2 Tier",
    "Set 1",
    "Set 2",
    "Set 3",
    "Winner",
    "Recorded At",
]

PHASE_LABELS = {
    "league": "League",
    "knockout_r1": "Knockout Round 1",
    "knockout_r2": "Knockout Round 2",
    "semifinal": "Semifinal",
    "final": "Final",
}


def format_phase(phase: str) -> str:
    return PHASE_LABELS.get(phase, phase)


def _set_cell(p1: Optional[int], p2: Optional[int]) -> str:
    if p1 is None:
        return ""
    return f"{p1}-{p2}"


def _player_cells(player: Optional[Player]) -> list:
    if player is None:
        return ["", "", ""]
    return [player.name, player.department or "", player.tier]


def build_results_csv(matches: Iterable[Match]) -> str:
    """Render matches (player1/player2 loaded) as CSV text with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    for match in matches:
        p1, p2 = match.player1, match.player2
        if match.winner_id == match.player1_id:
            winner = p1.name if p1 else ""
        else:
            winner = p2.name if p2 else ""

        writer.writerow(
            [match.id, format_phase(match.phase)]
            + _player_cells(p1)
            + _player_cells(p2)
            + [
                _set_cell(match.set1_p1, match.set1_p2),
                _set_cell(match.set2_p1, match.set2_p2),
                _set_cell(match.set3_p1, match.set3_p2),
                winner,
                match.recorded_at.isoformat() if match.recorded_at else "",
            ]
        )

    return buffer.getvalue()
