from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from dealfindr.adapters.config import config
from dealfindr.adapters.llm_client import make_text_generator
from dealfindr.services.assessment import assess_payload

app = typer.Typer(help="Assess a development opportunity from a JSON file.")


def _load_json(path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise typer.BadParameter(f"cannot read {path}: {e}") from e
    if not isinstance(data, dict):
        raise typer.BadParameter(f"{path} must contain a JSON object")
    return data


@app.command()
def assess(
    opportunity: Path = typer.Argument(..., help="Opportunity JSON file"),
    criteria: Optional[Path] = typer.Option(None, "--criteria", help="Criteria override JSON file"),
    quick: bool = typer.Option(False, "--quick", help="Skip narrative insights (no network call)"),
) -> None:
    """
    Print the assessment result as JSON.
    """
    opp_raw = _load_json(opportunity)
    criteria_raw = _load_json(criteria) if criteria else None

    generator = None if quick else make_text_generator(config)
    try:
        result = assess_payload(opp_raw, criteria_raw, quick=quick, generator=generator)
    except ValueError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(code=2)

    typer.echo(json.dumps(result.to_dict(), indent=2))


if __name__ == "__main__":
    app()
