"""CLI entrypoint for verdict-kit — typer app with `validate` and `run` commands."""

import asyncio
import sys
from pathlib import Path

import structlog
import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from verdict_kit.config.domain.pipeline import PipelineConfig
from verdict_kit.config.infrastructure.observer import StructlogConfigObserver
from verdict_kit.config.infrastructure.yaml_loader import load_pipeline_config
from verdict_kit.core.errors import VerdictKitError
from verdict_kit.evaluation.domain.answer import Answer
from verdict_kit.evaluation.domain.budget import BudgetReport
from verdict_kit.evaluation.domain.state import (
    ANSWERS,
    BUDGET,
    JUDGE_SCORES,
    QUESTION,
    REFERENCE_ANSWER,
    TRACE_LEVEL,
    VERDICT,
    VERIFICATION_TRACE,
    State,
    new_state,
)
from verdict_kit.llm.infrastructure.litellm import LiteLLMClient
from verdict_kit.pipeline.application.runner import PipelineRunner
from verdict_kit.pipeline.infrastructure.observer import StructlogPipelineObserver
from verdict_kit.pipeline.infrastructure.registry import default_registry
from verdict_kit.unit.infrastructure.observer import StructlogUnitObserver

app = typer.Typer(add_completion=False)

_console = Console()


def _configure_structlog(log_format: str) -> None:
    """Configure structlog based on the requested format."""
    if log_format == "console":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer()
    elif log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        typer.echo(f"Invalid log format: {log_format!r}. Must be 'console' or 'json'.")
        raise typer.Exit(code=1)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(0),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def _build_runner(config: PipelineConfig) -> PipelineRunner:
    llm_client = None
    if config.llm is not None:
        llm_client = LiteLLMClient(
            model=config.llm.model, timeout_seconds=config.llm.timeout_seconds
        )
    units = default_registry().build(
        config.units, llm_client=llm_client, observer=StructlogUnitObserver()
    )
    return PipelineRunner(
        name=config.name, units=units, observer=StructlogPipelineObserver()
    )


def _initial_state(
    question: str, reference: str | None, answers: list[str], trace_level: str
) -> State:
    state = (
        new_state()
        .with_(QUESTION, question)
        .with_(TRACE_LEVEL, trace_level)
        .with_(BUDGET, BudgetReport())
    )
    if reference is not None:
        state = state.with_(REFERENCE_ANSWER, reference)
    if answers:
        state = state.with_(
            ANSWERS,
            tuple(
                Answer(id=f"input_answer_{index + 1}", content=content)
                for index, content in enumerate(answers)
            ),
        )
    return state


def _print_result(state: State) -> None:
    answers = state.get(ANSWERS) or ()
    scores = state.get(JUDGE_SCORES) or ()
    verdict = state.get(VERDICT)
    winner_id = verdict.winner_answer.id if verdict is not None else None

    table = Table(title="Answers", show_lines=True)
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Answer")
    table.add_column("Score", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Reasoning", style="dim")
    for index, answer in enumerate(answers):
        marker = " [bold green]▲[/]" if answer.id == winner_id else ""
        if index < len(scores):
            summary = scores[index]
            table.add_row(
                f"{escape(answer.id)}{marker}",
                escape(answer.content),
                f"{summary.score:.3f}",
                f"{summary.confidence:.2f}",
                escape(summary.reasoning),
            )
        else:
            table.add_row(f"{escape(answer.id)}{marker}", escape(answer.content), "-", "-", "")
    _console.print(table)

    if verdict is not None:
        review = (
            "[bold red]required[/]" if verdict.requires_human_review else "[green]not required[/]"
        )
        _console.print(
            f"Verdict [bold]{verdict.id}[/]: winner [cyan]{verdict.winner_answer.id}[/], "
            f"aggregate {verdict.aggregate_score:.3f}, human review {review}"
        )

    budget = state.get(BUDGET)
    if budget is not None:
        _console.print(
            f"Budget: {budget.tokens_used} tokens over {budget.calls_made} metered calls"
        )

    trace = state.get(VERIFICATION_TRACE)
    if trace is not None:
        _console.print_json(trace)


@app.command()
def validate(
    config_path: Path = typer.Argument(..., help="Path to pipeline config YAML"),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: 'console' or 'json'"
    ),
) -> None:
    """Load a pipeline config, build every unit, and validate it."""
    _configure_structlog(log_format=log_format)
    try:
        config = load_pipeline_config(config_path, observer=StructlogConfigObserver())
        runner = _build_runner(config)
        runner.validate()
    except VerdictKitError as exc:
        typer.echo(str(exc))
        raise typer.Exit(code=1) from exc
    typer.echo(f"Pipeline '{config.name}' is valid ({len(runner.units)} units).")


@app.command()
def run(
    config_path: Path = typer.Argument(..., help="Path to pipeline config YAML"),
    question: str = typer.Option(..., "--question", "-q", help="Question to evaluate"),
    reference: str | None = typer.Option(
        None, "--reference", "-r", help="Reference answer for deterministic matchers"
    ),
    answers: list[str] | None = typer.Option(
        None, "--answer", "-a", help="Candidate answer to evaluate (repeatable)"
    ),
    trace_level: str = typer.Option(
        "info", "--trace-level", help="Set to 'debug' to record the verification trace"
    ),
    log_format: str = typer.Option(
        "console", "--log-format", help="Log format: 'console' or 'json'"
    ),
) -> None:
    """Run a pipeline over one question and print the verdict."""
    _configure_structlog(log_format=log_format)
    try:
        config = load_pipeline_config(config_path, observer=StructlogConfigObserver())
        runner = _build_runner(config)
        state = asyncio.run(
            runner.run(
                _initial_state(question, reference, answers or [], trace_level)
            )
        )
    except KeyboardInterrupt:
        typer.echo("Pipeline interrupted.")
        sys.exit(1)
    except VerdictKitError as exc:
        typer.echo(str(exc))
        sys.exit(1)
    except Exception as exc:  # noqa: BLE001
        typer.echo(f"Unexpected error: {exc}\nPlease report this bug.")
        sys.exit(1)

    _print_result(state)


if __name__ == "__main__":
    app()
