"""Console text for training progress and results."""

from ..domain.types import BoardSnapshot, Checkpoint, TrainingReport
from .text_board import render_board

SEPARATOR = "-" * 36


def format_run_header(run_id: str, snapshot: BoardSnapshot, obstacles_enabled: bool) -> str:
    return "\n".join([
        f"Id: {run_id}",
        f"Board Dimensions: {snapshot.rows} x {snapshot.cols}",
        f"Obstacles Active: {obstacles_enabled}",
        f"{render_board(snapshot)}\n",
    ])


def format_checkpoint(checkpoint: Checkpoint) -> str:
    return "\n".join([
        f"Episodes: {checkpoint.episodes}",
        f"Actions: {checkpoint.actions}",
        f"Rate: {checkpoint.exploration_rate}",
        "",
    ])


def format_report(report: TrainingReport) -> str:
    """Final summary of a run, including the learned board."""
    lines = [f"Id: {report.run_id}"]
    if report.final_board is not None:
        lines.append(f"{render_board(report.final_board)}\n")
    lines.extend([
        f"Solving took {report.elapsed_time:.3f} seconds",
        f"Total Episodes: {report.episodes}",
        f"Total Actions: {report.actions}",
        f"Board Dimensions: {report.rows} x {report.cols}",
        f"Obstacles Active: {report.obstacles_enabled}",
        f"PlayerSpot: {report.player}",
        f"GoalSpot: {report.goal}",
        SEPARATOR,
    ])
    return "\n".join(lines)
