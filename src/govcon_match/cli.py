"""CLI for the government opportunity match scoring engine.

Commands:
- set-asides: List the set-aside catalog by priority (filter by type or agency)
- eligibility: Resolve certifications against a set-aside code
- profile-eligibility: Set-asides a profile qualifies for, and expiring certifications
- score: Score one profile against one opportunity (optionally with AI insights)
- score-batch: Rank many opportunities for one profile and write CSV outputs
- record-outcome: Record a bid outcome against a stored match score
- calibration: Show aggregate outcome bookkeeping totals (and recorded outcomes)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Annotated, Protocol, cast

import typer
from rich import print as rprint
from rich.table import Table

from . import __version__
from .application.batch import run_batch_scoring
from .application.explain import explain_match
from .application.inputs import load_opportunity, load_profile
from .application.reference_data import load_reference_data
from .application.scoring_service import MatchScoringService
from .config import MatchConfig
from .config_file import load_match_config_file
from .domain.certifications import expiring_certifications
from .domain.insights import attach_insights
from .domain.match_score import MatchScore, calculate_match_score
from .domain.notifications import notification_readiness
from .domain.outcomes import OUTCOMES, Outcome
from .domain.reference import ReferenceData
from .domain.set_asides import (
    SET_ASIDE_TYPES,
    SetAsideType,
    eligible_set_asides,
    format_set_aside,
    resolve_eligibility,
    sole_source_threshold,
    user_set_aside_eligibility,
)
from .exceptions import MatchScoringError
from .infrastructure.io.validation import IncomingDataError
from .observability import set_log_level
from .protocols import CompletionClient, FileSystem, MatchScoreStore


class DependenciesBuilder(Protocol):
    """Protocol for constructing CLI dependencies."""

    def __call__(self, *, config: MatchConfig) -> CliDependencies:
        """Build dependencies for CLI commands."""
        ...


@dataclass(frozen=True)
class CliDependencies:
    """Concrete dependencies required by the CLI."""

    fs: FileSystem
    store: MatchScoreStore
    completion_client: CompletionClient | None
    today: Callable[[], date] = field(default=date.today)


@dataclass(frozen=True)
class CliContext:
    """Runtime CLI context for a single command invocation."""

    config: MatchConfig
    deps_builder: DependenciesBuilder

    def build_dependencies(self) -> CliDependencies:
        return self.deps_builder(config=self.config)


class CliContextNotInitialisedError(typer.BadParameter):
    """Raised when CLI context is missing."""

    def __init__(self) -> None:
        super().__init__("CLI context is not initialised. Use the govcon-match entry point.")


class UnknownOutcomeError(typer.BadParameter):
    """Raised when --outcome is not a supported outcome."""

    def __init__(self, value: str) -> None:
        super().__init__(f"Unknown outcome {value!r}; expected one of {', '.join(OUTCOMES)}.")


class UnknownSetAsideTypeError(typer.BadParameter):
    """Raised when --type is not a supported set-aside type."""

    def __init__(self, value: str) -> None:
        super().__init__(
            f"Unknown set-aside type {value!r}; expected one of {', '.join(SET_ASIDE_TYPES)}."
        )


DEFAULT_BATCH_OUT_DIR = Path("data/processed")


def _get_context(ctx: typer.Context) -> CliContext:
    if not isinstance(ctx.obj, CliContext):
        raise CliContextNotInitialisedError()
    return ctx.obj


def _fail(exc: Exception) -> typer.Exit:
    rprint(f"[red]✗ {exc}[/red]")
    return typer.Exit(code=1)


def _version_callback(value: bool) -> None:
    if value:
        rprint(f"govcon-match {__version__}")
        raise typer.Exit()


def _load_reference(context: CliContext, deps: CliDependencies) -> ReferenceData:
    try:
        return load_reference_data(config=context.config, fs=deps.fs)
    except MatchScoringError as exc:
        raise _fail(exc) from exc


def _print_score(match_score: MatchScore, reference: ReferenceData) -> None:
    rprint(
        f"[bold]{match_score.match_score_id}[/bold]: "
        f"[green]{match_score.overall_score}/100[/green] "
        f"(confidence {match_score.confidence:.2f}, {match_score.algorithm_version})"
    )
    table = Table("Category", "Score", "Weight", "Confidence", "Top reason")
    for name, factor in match_score.detailed_factors.items():
        table.add_row(
            name,
            f"{factor.score:.1f}",
            str(factor.weight),
            f"{factor.confidence:.2f}",
            factor.details[0] if factor.details else "",
        )
    rprint(table)
    eligibility = match_score.eligibility
    rprint(
        f"Set-aside eligibility: {eligibility.match_type} "
        f"(score {eligibility.score}, match={eligibility.is_match})"
    )
    readiness = notification_readiness(match_score, reference.policy.notification)
    rprint(f"Notify: {'yes' if readiness.should_notify else 'no'} ({'; '.join(readiness.reasons)})")
    for recommendation in match_score.recommendations:
        rprint(f"  • {recommendation}")
    if match_score.insights is not None:
        rprint("[bold]Insights[/bold]")
        for name, factor in match_score.detailed_factors.items():
            if factor.insights is None or factor.insights.is_empty:
                continue
            rprint(f"  {name}:")
            for label, items in (
                ("strength", factor.insights.strengths),
                ("weakness", factor.insights.weaknesses),
                ("opportunity", factor.insights.opportunities),
            ):
                for item in items:
                    rprint(f"    {label}: {item}")


def create_app(deps_builder: DependenciesBuilder) -> typer.Typer:
    """Create a Typer app wired with the provided dependencies builder."""
    app = typer.Typer(
        add_completion=False,
        help="Government contracting opportunity match scoring and set-aside eligibility.",
    )

    @app.callback()
    def main(
        ctx: typer.Context,
        config_path: Annotated[
            Path | None,
            typer.Option("--config", help="Optional TOML config file (overrides env values)."),
        ] = None,
        version: Annotated[
            bool,
            typer.Option(
                "--version",
                callback=_version_callback,
                is_eager=True,
                help="Show the installed version and exit.",
            ),
        ] = False,
    ) -> None:
        """Initialise CLI context."""
        config = MatchConfig.from_env()
        if config_path is not None:
            try:
                file_config = load_match_config_file(
                    path=config_path, fs=deps_builder(config=config).fs
                )
            except MatchScoringError as exc:
                raise _fail(exc) from exc
            config = config.with_file_overrides(file_config)
        set_log_level(config.log_level)
        ctx.obj = CliContext(config=config, deps_builder=deps_builder)

    @app.command("set-asides")
    def set_asides(
        ctx: typer.Context,
        set_aside_type: Annotated[
            str | None,
            typer.Option("--type", "-t", help="competitive, sole_source, or partial."),
        ] = None,
        agency: Annotated[
            str | None,
            typer.Option("--agency", "-a", help="Only programs restricted to this agency."),
        ] = None,
        general: Annotated[
            bool, typer.Option("--general", help="Only government-wide programs.")
        ] = False,
    ) -> None:
        """List set-aside programs by priority."""
        if set_aside_type is not None and set_aside_type not in SET_ASIDE_TYPES:
            raise UnknownSetAsideTypeError(set_aside_type)
        context = _get_context(ctx)
        catalog = _load_reference(context, context.build_dependencies()).set_asides
        if agency:
            ordered = catalog.agency_specific(agency)
        elif general:
            ordered = catalog.general()
        else:
            ordered = tuple(sorted(catalog.definitions, key=lambda d: (d.priority, d.code)))
        if set_aside_type is not None:
            of_type = set(catalog.by_type(cast(SetAsideType, set_aside_type)))
            ordered = tuple(d for d in ordered if d in of_type)
        if not ordered:
            rprint("[yellow]No set-aside programs match these filters.[/yellow]")
            return
        table = Table("Priority", "Code", "Name", "Type", "Agency", "Certifications")
        for definition in ordered:
            table.add_row(
                str(definition.priority),
                definition.code,
                definition.name,
                definition.type,
                definition.agency_specific or "all",
                ", ".join(definition.related_certifications),
            )
        rprint(table)

    @app.command()
    def eligibility(
        ctx: typer.Context,
        cert: Annotated[
            list[str] | None,
            typer.Option("--cert", "-c", help="Certification id held (repeatable)."),
        ] = None,
        set_aside: Annotated[
            str | None,
            typer.Option("--set-aside", "-s", help="Opportunity set-aside code."),
        ] = None,
        manufacturing: Annotated[
            bool,
            typer.Option("--manufacturing", help="Use the manufacturing sole-source ceiling."),
        ] = False,
    ) -> None:
        """Resolve certifications against a set-aside code."""
        context = _get_context(ctx)
        reference = _load_reference(context, context.build_dependencies())
        catalog = reference.set_asides
        certs = cert or []
        result = resolve_eligibility(certs, set_aside, catalog)
        label = format_set_aside(result.set_aside_code, catalog) if set_aside else "open market"
        rprint(
            f"[bold]{label}[/bold]: match={result.is_match} "
            f"type={result.match_type} score={result.score}"
        )
        threshold = sole_source_threshold(set_aside or "", catalog, is_manufacturing=manufacturing)
        if threshold is not None:
            rprint(f"  Sole-source ceiling: ${threshold:,.0f}")
        eligible = eligible_set_asides(certs, catalog)
        if eligible:
            rprint("Eligible set-asides (by priority):")
            for definition in eligible:
                rprint(f"  {definition.priority:>2}. {definition.display_name}")
        else:
            rprint("[yellow]No set-aside eligibility from these certifications.[/yellow]")

    @app.command("profile-eligibility")
    def profile_eligibility(
        ctx: typer.Context,
        profile_path: Annotated[
            Path, typer.Option("--profile", "-p", help="Company profile JSON.")
        ],
        within_days: Annotated[
            int,
            typer.Option("--within-days", min=1, help="Expiry warning horizon in days."),
        ] = 90,
    ) -> None:
        """Show the set-asides a profile qualifies for today and expiring certifications."""
        context = _get_context(ctx)
        deps = context.build_dependencies()
        reference = _load_reference(context, deps)
        try:
            profile = load_profile(profile_path, deps.fs)
        except IncomingDataError as exc:
            raise _fail(exc) from exc
        today = deps.today()

        records = user_set_aside_eligibility(
            profile.certifications, reference.set_asides, today=today
        )
        if records:
            table = Table("Set-aside", "Qualifying certifications", "Eligible since")
            for record in records:
                table.add_row(
                    format_set_aside(record.set_aside_code, reference.set_asides),
                    ", ".join(record.qualifying_certifications),
                    record.eligibility_date.isoformat() if record.eligibility_date else "-",
                )
            rprint(table)
        else:
            rprint("[yellow]No effective certifications qualify for a set-aside.[/yellow]")

        for cert in expiring_certifications(
            profile.certifications, today=today, within_days=within_days
        ):
            rprint(
                f"[yellow]! {cert.name or cert.certification_id} expires "
                f"{cert.expiration_date}[/yellow]"
            )

    @app.command()
    def score(
        ctx: typer.Context,
        profile_path: Annotated[
            Path, typer.Option("--profile", "-p", help="Company profile JSON.")
        ],
        opportunity_path: Annotated[
            Path, typer.Option("--opportunity", "-o", help="Opportunity JSON.")
        ],
        explain: Annotated[
            bool,
            typer.Option("--explain/--no-explain", help="Request AI insights (best effort)."),
        ] = False,
        save: Annotated[
            bool,
            typer.Option("--save/--no-save", help="Persist the score to the match store."),
        ] = True,
    ) -> None:
        """Score one profile against one opportunity."""
        context = _get_context(ctx)
        deps = context.build_dependencies()
        reference = _load_reference(context, deps)
        try:
            profile = load_profile(profile_path, deps.fs)
            opportunity = load_opportunity(opportunity_path, deps.fs)
        except IncomingDataError as exc:
            raise _fail(exc) from exc

        service = MatchScoringService(reference=reference, store=deps.store, today=deps.today)
        if save:
            match_score = service.score(profile, opportunity)
        else:
            match_score = calculate_match_score(
                profile, opportunity, reference=reference, today=deps.today()
            )

        if explain:
            if deps.completion_client is None or not context.config.insights_enabled:
                rprint("[yellow]AI insights are not configured; showing scores only.[/yellow]")
            else:
                insights = explain_match(
                    deps.completion_client,
                    profile,
                    opportunity,
                    match_score,
                    timeout_seconds=context.config.ai_timeout_seconds,
                )
                if insights is None:
                    rprint("[yellow]AI insights unavailable; showing scores only.[/yellow]")
                elif save:
                    match_score = service.attach_insights(match_score, insights)
                else:
                    match_score = attach_insights(match_score, insights)
        _print_score(match_score, reference)

    @app.command("score-batch")
    def score_batch(
        ctx: typer.Context,
        profile_path: Annotated[
            Path, typer.Option("--profile", "-p", help="Company profile JSON.")
        ],
        opportunities_path: Annotated[
            Path,
            typer.Option("--opportunities", "-i", help='JSON with an "opportunities" list.'),
        ],
        out_dir: Annotated[
            Path, typer.Option("--out-dir", "-d", help="Directory for CSV outputs.")
        ] = DEFAULT_BATCH_OUT_DIR,
    ) -> None:
        """Rank many opportunities for one profile."""
        context = _get_context(ctx)
        deps = context.build_dependencies()
        reference = _load_reference(context, deps)
        try:
            result = run_batch_scoring(
                profile_path=profile_path,
                opportunities_path=opportunities_path,
                out_dir=out_dir,
                reference=reference,
                fs=deps.fs,
                today=deps.today(),
            )
        except IncomingDataError as exc:
            raise _fail(exc) from exc
        rprint("[green]✓ Batch scoring complete:[/green]")
        rprint(f"  scores: {result.scores_path} ({len(result.scores)} opportunities)")
        rprint(f"  shortlist: {result.shortlist_path} ({result.shortlisted} opportunities)")
        if result.set_asides.top:
            top = ", ".join(
                f"{share.code} {share.count} ({share.percentage}%)"
                for share in result.set_asides.top
            )
            rprint(f"  set-asides: {top}")

    @app.command("record-outcome")
    def record_outcome(
        ctx: typer.Context,
        match_score_id: Annotated[str, typer.Argument(help="Stored match score id.")],
        outcome: Annotated[
            str, typer.Option("--outcome", help="won, lost, no_bid, or withdrawn.")
        ],
        actual_value: Annotated[
            float | None, typer.Option("--actual-value", help="Awarded contract value.")
        ] = None,
        competitor_count: Annotated[
            int | None, typer.Option("--competitor-count", help="Number of competing bids.")
        ] = None,
        notes: Annotated[str | None, typer.Option("--notes", help="Free-text notes.")] = None,
    ) -> None:
        """Record a bid outcome against a stored match score."""
        normalized = outcome.strip().lower()
        if normalized not in OUTCOMES:
            raise UnknownOutcomeError(outcome)
        context = _get_context(ctx)
        deps = context.build_dependencies()
        reference = _load_reference(context, deps)
        service = MatchScoringService(reference=reference, store=deps.store, today=deps.today)
        try:
            impact = service.record_outcome(
                match_score_id,
                cast(Outcome, normalized),
                actual_value=actual_value,
                competitor_count=competitor_count,
                notes=notes,
            )
        except MatchScoringError as exc:
            raise _fail(exc) from exc
        correctness = (
            "not evaluated"
            if impact.was_correct_prediction is None
            else ("correct" if impact.was_correct_prediction else "incorrect")
        )
        rprint(f"[green]✓ Recorded {normalized} for {match_score_id}[/green]")
        rprint(f"  Prediction: {'win' if impact.predicted_win else 'loss'} ({correctness})")
        rprint(
            f"  Accuracy {impact.accuracy_adjustment:+.2f}, "
            f"confidence {impact.confidence_adjustment:+.2f}"
        )

    @app.command()
    def calibration(
        ctx: typer.Context,
        outcomes: Annotated[
            bool, typer.Option("--outcomes", help="Also list every recorded outcome.")
        ] = False,
    ) -> None:
        """Show aggregate outcome bookkeeping totals."""
        context = _get_context(ctx)
        store = context.build_dependencies().store
        totals = store.load_calibration()
        hit_rate = totals.hit_rate
        rprint(f"Outcomes recorded: {totals.outcomes_recorded}")
        rprint(
            f"Evaluated predictions: {totals.evaluated_predictions} "
            f"(hit rate {'n/a' if hit_rate is None else f'{hit_rate:.0%}'})"
        )
        rprint(f"Accuracy score: {totals.accuracy_score:+.2f}")
        rprint(f"Confidence calibration: {totals.confidence_calibration:+.2f}")
        if outcomes:
            table = Table("Recorded", "Match score", "Outcome", "Predicted", "Correct")
            for record in sorted(store.list_outcomes(), key=lambda r: r.recorded_at):
                correct = record.impact.was_correct_prediction
                table.add_row(
                    record.recorded_at.date().isoformat(),
                    record.match_score_id,
                    record.outcome,
                    str(record.predicted_score),
                    "-" if correct is None else ("yes" if correct else "no"),
                )
            rprint(table)

    return app
