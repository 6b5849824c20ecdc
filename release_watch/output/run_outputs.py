"""
Machine-readable run result for CI callers.

Results are appended as ``key=value`` lines, the format GitHub Actions
reads from the file named by ``$GITHUB_OUTPUT``:

    new_models=true
    model_count=2
    model_summary=OpenAI: GPT-5, Anthropic: Claude Opus 4.5
"""

from __future__ import annotations

from pathlib import Path

from ..core.types import RunStatus, RunSummary


def build_run_outputs(summary: RunSummary) -> dict[str, str]:
    """Return the key/value pairs describing a run."""
    if summary.status == RunStatus.FAILED_FATAL:
        return {"new_models": "false", "model_count": "0", "run_failed": "true"}
    if not summary.has_new:
        return {"new_models": "false", "model_count": "0"}
    return {
        "new_models": "true",
        "model_count": str(summary.count),
        "model_summary": _single_line(summary.summary_line),
    }


def write_run_outputs(summary: RunSummary, path: Path) -> None:
    """Append the run result to a key/value output file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        for key, value in build_run_outputs(summary).items():
            handle.write(f"{key}={value}\n")


def _single_line(value: str) -> str:
    return " ".join(value.split())
