"""
Command-Line Interface for IncomeFlow.

Purpose
-------
Manage income sources and savings goals, watch income accumulate in real
time, and print forecasts, allocation checks and income reports from the
terminal.

Commands
--------
- income: add, edit, pause, resume, delete and list income sources
- goal: add, edit, delete and list goals, plus a summary
- accrual: income accumulated since the start of a period (optionally live)
- forecast: recompute and store goal completion forecasts
- allocation: monthly income versus what the goals draw from it
- report: monthly income over a report period, optionally plotted

Example Usage
-------------
    # Add a salary and a goal funded by 10% of total income
    $ incomeflow income add Salary 4200 --cycle monthly
    $ incomeflow goal add "Emergency fund" --target 6000 --type PERCENT_TOTAL --value 10

    # Live accumulated income for today
    $ incomeflow accrual --period today --watch

    # Forecast completion dates
    $ incomeflow forecast

Global options select the user (`--user`) and the data file
(`--data-file`); both default to the INCOMEFLOW_* settings.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

import click

from .config import AppSettings
from .constants import DASHBOARD_PERIODS, DEFAULT_DASHBOARD_PERIOD, DEFAULT_REPORT_PERIOD, REPORT_PERIODS
from .exceptions import IncomeFlowError

# Version
__version__ = "0.1.0"

CYCLES = ["daily", "weekly", "monthly", "yearly"]
ALLOCATION_TYPES = ["PERCENT_TOTAL", "PERCENT_SOURCE", "FIXED_TOTAL", "FIXED_SOURCE"]


def _get_console():
    """Rich console, imported lazily for startup time."""
    from rich.console import Console

    return Console()


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _ledger(ctx: click.Context):
    """Ledger bound to the selected data file and user."""
    from .ledger import Ledger
    from .store import JsonFileStore

    if "ledger" not in ctx.obj:
        try:
            store = JsonFileStore(ctx.obj["data_file"])
        except IncomeFlowError as e:
            _fail(f"could not open {ctx.obj['data_file']}: {e}")
        ctx.obj["ledger"] = Ledger(store, ctx.obj["user"])
    return ctx.obj["ledger"]


def _money(ctx: click.Context, value: float) -> str:
    from .utils import format_currency

    return format_currency(value, symbol=ctx.obj["settings"].currency_symbol)


def _describe_allocation(ctx: click.Context, allocation, source_names) -> str:
    from .goals import FixedFromSource, FixedFromTotal, PercentOfSource, PercentOfTotal

    if isinstance(allocation, PercentOfTotal):
        return f"{allocation.percent:g}% of total"
    if isinstance(allocation, PercentOfSource):
        name = source_names.get(allocation.source_id, "missing source")
        return f"{allocation.percent:g}% of {name}"
    if isinstance(allocation, FixedFromTotal):
        return f"{_money(ctx, allocation.amount)}/{allocation.cycle.value} from total"
    if isinstance(allocation, FixedFromSource):
        name = source_names.get(allocation.source_id, "missing source")
        return f"{_money(ctx, allocation.amount)}/{allocation.cycle.value} from {name}"
    return str(allocation)


@click.group()
@click.version_option(version=__version__, prog_name="incomeflow")
@click.option("--quiet", "-q", is_flag=True, help="Plain, script-friendly output")
@click.option("--user", "-u", default=None, help="User id (default: INCOMEFLOW_DEFAULT_USER)")
@click.option(
    "--data-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON data file (default: INCOMEFLOW_DATA_FILE)",
)
@click.pass_context
def main(ctx: click.Context, quiet: bool, user: Optional[str], data_file: Optional[Path]) -> None:
    """
    IncomeFlow - income tracking and goal-based savings planning.

    Record recurring income, set savings goals funded by a share of that
    income, and see when each goal will be reached.

    Use 'incomeflow COMMAND --help' for command-specific help.
    """
    settings = AppSettings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["console"] = _get_console()
    ctx.obj["settings"] = settings
    ctx.obj["user"] = user or settings.default_user
    ctx.obj["data_file"] = data_file or settings.data_file


# ============================================================================
# INCOME SOURCES
# ============================================================================

@main.group()
def income() -> None:
    """Income source management commands."""
    pass


@income.command("add")
@click.argument("name")
@click.argument("amount", type=float)
@click.option("--cycle", "-c", type=click.Choice(CYCLES), default="monthly", show_default=True)
@click.pass_context
def income_add(ctx: click.Context, name: str, amount: float, cycle: str) -> None:
    """
    Add an active income source.

    Example:
        incomeflow income add Salary 4200 --cycle monthly
    """
    ledger = _ledger(ctx)
    try:
        source = ledger.add_income_source(name=name, amount=amount, cycle=cycle)
    except IncomeFlowError as e:
        _fail(str(e))

    if ctx.obj["quiet"]:
        click.echo(source.id)
    else:
        ctx.obj["console"].print(
            f"[green]✓[/green] Added [bold]{source.name}[/bold] "
            f"({_money(ctx, source.amount)} {source.cycle.value}) id={source.id}"
        )


@income.command("edit")
@click.argument("source_id")
@click.option("--name", default=None)
@click.option("--amount", type=float, default=None)
@click.option("--cycle", type=click.Choice(CYCLES), default=None)
@click.pass_context
def income_edit(
    ctx: click.Context,
    source_id: str,
    name: Optional[str],
    amount: Optional[float],
    cycle: Optional[str],
) -> None:
    """Change the name, amount or cycle of an income source."""
    ledger = _ledger(ctx)
    try:
        source = ledger.edit_income_source(source_id, name=name, amount=amount, cycle=cycle)
    except IncomeFlowError as e:
        _fail(str(e))
    if not ctx.obj["quiet"]:
        ctx.obj["console"].print(f"[green]✓[/green] Updated [bold]{source.name}[/bold]")


def _set_status(ctx: click.Context, source_id: str, pause: bool) -> None:
    ledger = _ledger(ctx)
    try:
        if pause:
            source = ledger.pause_income_source(source_id)
        else:
            source = ledger.resume_income_source(source_id)
    except IncomeFlowError as e:
        _fail(str(e))
    if not ctx.obj["quiet"]:
        ctx.obj["console"].print(f"{source.name}: [bold]{source.status.value}[/bold]")


@income.command("pause")
@click.argument("source_id")
@click.pass_context
def income_pause(ctx: click.Context, source_id: str) -> None:
    """Pause a source; it stops counting toward every calculation."""
    _set_status(ctx, source_id, pause=True)


@income.command("resume")
@click.argument("source_id")
@click.pass_context
def income_resume(ctx: click.Context, source_id: str) -> None:
    """Resume a paused source."""
    _set_status(ctx, source_id, pause=False)


@income.command("delete")
@click.argument("source_id")
@click.pass_context
def income_delete(ctx: click.Context, source_id: str) -> None:
    """Delete an income source."""
    ledger = _ledger(ctx)
    try:
        ledger.delete_income_source(source_id)
    except IncomeFlowError as e:
        _fail(str(e))
    if not ctx.obj["quiet"]:
        ctx.obj["console"].print(f"Deleted income source {source_id}")


@income.command("list")
@click.option("--status", type=click.Choice(["active", "paused"]), default=None)
@click.pass_context
def income_list(ctx: click.Context, status: Optional[str]) -> None:
    """List income sources with their monthly equivalent."""
    from .income import IncomeStatus

    ledger = _ledger(ctx)
    try:
        sources = ledger.income_sources(IncomeStatus(status) if status else None)
    except IncomeFlowError as e:
        _fail(str(e))

    if ctx.obj["quiet"]:
        for s in sources:
            click.echo(f"{s.id}\t{s.name}\t{s.amount:g}\t{s.cycle.value}\t{s.status.value}")
        return

    from rich.table import Table

    table = Table(title="Income Sources", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Amount", justify="right")
    table.add_column("Cycle")
    table.add_column("Monthly", style="green", justify="right")
    table.add_column("Status")
    for s in sources:
        table.add_row(
            s.id[:8], s.name, _money(ctx, s.amount), s.cycle.value,
            _money(ctx, s.monthly_amount), s.status.value,
        )
    ctx.obj["console"].print(table)


# ============================================================================
# GOALS
# ============================================================================

@main.group()
def goal() -> None:
    """Savings goal management commands."""
    pass


def _report_warnings(warnings) -> None:
    for message in warnings:
        click.echo(f"Warning: {message}", err=True)


@goal.command("add")
@click.argument("name")
@click.option("--target", "target_amount", type=float, required=True, help="Target amount")
@click.option("--type", "allocation_type", type=click.Choice(ALLOCATION_TYPES), required=True)
@click.option("--value", "allocation_value", type=float, required=True,
              help="Percentage (PERCENT_*) or amount per cycle (FIXED_*)")
@click.option("--cycle", "allocation_cycle", type=click.Choice(CYCLES), default=None,
              help="Cycle of a FIXED_* allocation")
@click.option("--source", "source_income_id", default=None,
              help="Income source id of a *_SOURCE allocation")
@click.option("--target-date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_context
def goal_add(
    ctx: click.Context,
    name: str,
    target_amount: float,
    allocation_type: str,
    allocation_value: float,
    allocation_cycle: Optional[str],
    source_income_id: Optional[str],
    target_date: Optional[datetime],
) -> None:
    """
    Add a savings goal.

    Allocation warnings (over 100%, more than the income) are printed but
    do not prevent the save.

    Example:
        incomeflow goal add Car --target 12000 --type FIXED_TOTAL --value 50 --cycle weekly
    """
    ledger = _ledger(ctx)
    try:
        result = ledger.save_goal(
            name=name,
            target_amount=target_amount,
            allocation_type=allocation_type,
            allocation_value=allocation_value,
            allocation_cycle=allocation_cycle,
            source_income_id=source_income_id,
            target_date=target_date.date() if target_date else None,
        )
    except IncomeFlowError as e:
        _fail(str(e))

    _report_warnings(result.warnings)
    if ctx.obj["quiet"]:
        click.echo(result.goal.id)
    else:
        ctx.obj["console"].print(
            f"[green]✓[/green] Added goal [bold]{result.goal.name}[/bold] id={result.goal.id}"
        )


@goal.command("edit")
@click.argument("goal_id")
@click.option("--name", default=None)
@click.option("--target", "target_amount", type=float, default=None)
@click.option("--current", "current_amount", type=float, default=None)
@click.option("--type", "allocation_type", type=click.Choice(ALLOCATION_TYPES), default=None)
@click.option("--value", "allocation_value", type=float, default=None)
@click.option("--cycle", "allocation_cycle", type=click.Choice(CYCLES), default=None)
@click.option("--source", "source_income_id", default=None)
@click.option("--target-date", type=click.DateTime(formats=["%Y-%m-%d"]), default=None)
@click.pass_context
def goal_edit(
    ctx: click.Context,
    goal_id: str,
    name: Optional[str],
    target_amount: Optional[float],
    current_amount: Optional[float],
    allocation_type: Optional[str],
    allocation_value: Optional[float],
    allocation_cycle: Optional[str],
    source_income_id: Optional[str],
    target_date: Optional[datetime],
) -> None:
    """
    Update a goal; omitted options keep their stored value.

    Changing --type drops the stored cycle and source, so pass the ones the
    new type needs.
    """
    from .goals import allocation_to_record

    ledger = _ledger(ctx)
    try:
        existing = ledger.store.get_goal(ledger.user_id, goal_id)
    except IncomeFlowError as e:
        _fail(str(e))

    stored = allocation_to_record(existing.allocation)
    if allocation_type is not None and allocation_type != stored["allocation_type"]:
        stored["allocation_cycle"] = None
        stored["source_income_id"] = None

    form = {
        "name": existing.name if name is None else name,
        "target_amount": existing.target_amount if target_amount is None else target_amount,
        "current_amount": existing.current_amount if current_amount is None else current_amount,
        "target_date": existing.target_date if target_date is None else target_date.date(),
        "allocation_type": allocation_type or stored["allocation_type"],
        "allocation_value": (
            stored["allocation_value"] if allocation_value is None else allocation_value
        ),
        "allocation_cycle": allocation_cycle or stored["allocation_cycle"],
        "source_income_id": source_income_id or stored["source_income_id"],
    }
    try:
        result = ledger.save_goal(goal_id, **form)
    except IncomeFlowError as e:
        _fail(str(e))

    _report_warnings(result.warnings)
    if not ctx.obj["quiet"]:
        ctx.obj["console"].print(f"[green]✓[/green] Updated goal [bold]{result.goal.name}[/bold]")


@goal.command("delete")
@click.argument("goal_id")
@click.pass_context
def goal_delete(ctx: click.Context, goal_id: str) -> None:
    """Delete a goal."""
    ledger = _ledger(ctx)
    try:
        ledger.delete_goal(goal_id)
    except IncomeFlowError as e:
        _fail(str(e))
    if not ctx.obj["quiet"]:
        ctx.obj["console"].print(f"Deleted goal {goal_id}")


@goal.command("list")
@click.pass_context
def goal_list(ctx: click.Context) -> None:
    """List goals with progress, monthly funding and forecast."""
    from .goals import monthly_contribution
    from .income import active_sources, total_monthly_income

    ledger = _ledger(ctx)
    try:
        goals = ledger.goals()
        sources = ledger.income_sources()
    except IncomeFlowError as e:
        _fail(str(e))

    active = active_sources(sources)
    total = total_monthly_income(active)
    names = {s.id: s.name for s in sources}

    if ctx.obj["quiet"]:
        for g in goals:
            forecast = g.forecasted_completion_date.isoformat() if g.forecasted_completion_date else "-"
            click.echo(
                f"{g.id}\t{g.name}\t{g.current_amount:g}/{g.target_amount:g}\t"
                f"{g.progress * 100:.1f}%\t{monthly_contribution(g, active, total):.2f}\t{forecast}"
            )
        return

    from rich.table import Table

    table = Table(title="Goals", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Saved", justify="right")
    table.add_column("Progress", justify="right")
    table.add_column("Allocation")
    table.add_column("Monthly", style="green", justify="right")
    table.add_column("Forecast")
    for g in goals:
        if g.is_complete:
            forecast = "[green]completed[/green]"
        elif g.forecasted_completion_date is None:
            forecast = "-"
        else:
            forecast = g.forecasted_completion_date.isoformat()
        table.add_row(
            g.id[:8],
            g.name,
            f"{_money(ctx, g.current_amount)} / {_money(ctx, g.target_amount)}",
            f"{g.progress * 100:.1f}%",
            _describe_allocation(ctx, g.allocation, names),
            _money(ctx, monthly_contribution(g, active, total)),
            forecast,
        )
    ctx.obj["console"].print(table)


@goal.command("summary")
@click.pass_context
def goal_summary(ctx: click.Context) -> None:
    """Totals over all goals."""
    from .goals import summarize_goals

    ledger = _ledger(ctx)
    try:
        summary = summarize_goals(ledger.goals())
    except IncomeFlowError as e:
        _fail(str(e))

    lines = [
        f"Active goals: {summary.active}",
        f"Completed goals: {summary.completed}",
        f"Total target: {_money(ctx, summary.total_target)}",
        f"Total saved: {_money(ctx, summary.total_current)}",
        f"Overall progress: {summary.overall_progress:.1f}%",
    ]
    if ctx.obj["quiet"]:
        for line in lines:
            click.echo(line)
    else:
        from rich.panel import Panel

        ctx.obj["console"].print(Panel("\n".join(lines), title="Goal Summary"))


# ============================================================================
# VIEWS
# ============================================================================

@main.command()
@click.option("--period", "-p", type=click.Choice(list(DASHBOARD_PERIODS)),
              default=DEFAULT_DASHBOARD_PERIOD, show_default=True)
@click.option("--since", type=click.DateTime(), default=None,
              help="Start of a custom period (implies --period custom)")
@click.option("--watch", "-w", is_flag=True, help="Refresh continuously")
@click.option("--ticks", type=int, default=None, help="Stop watching after N refreshes")
@click.pass_context
def accrual(
    ctx: click.Context,
    period: str,
    since: Optional[datetime],
    watch: bool,
    ticks: Optional[int],
) -> None:
    """
    Income accumulated since the start of a period.

    Example:
        incomeflow accrual --period today --watch
    """
    from .accrual import AccrualTicker

    if since is not None and period != "custom":
        if ctx.get_parameter_source("period") is not click.core.ParameterSource.DEFAULT:
            _fail("--since can only be used with --period custom")
        period = "custom"

    ledger = _ledger(ctx)
    try:
        dashboard = ledger.dashboard(period, since=since)
    except IncomeFlowError as e:
        _fail(str(e))
    if dashboard.error:
        click.echo(f"Warning: {dashboard.error}", err=True)

    quiet = ctx.obj["quiet"]
    console = ctx.obj["console"]

    def render(snapshot):
        if quiet:
            return f"{snapshot.total:.2f}"
        from rich.table import Table

        table = Table(title=f"Accumulated income ({period})", show_header=True)
        table.add_column("Source", style="cyan")
        table.add_column("Accumulated", style="green", justify="right")
        for entry in snapshot.per_source:
            table.add_row(entry.name, _money(ctx, entry.amount))
        table.add_row("[bold]Total[/bold]", f"[bold]{_money(ctx, snapshot.total)}[/bold]")
        return table

    if not watch:
        if quiet:
            click.echo(render(dashboard.snapshot))
        else:
            console.print(render(dashboard.snapshot))
        return

    ticker = AccrualTicker(
        dashboard.sources,
        since=dashboard.snapshot.since,
        interval=ctx.obj["settings"].tick_interval,
    )
    try:
        if quiet:
            ticker.run(lambda snap: click.echo(render(snap)), ticks=ticks)
        else:
            from rich.live import Live

            with Live(render(dashboard.snapshot), console=console) as live:
                ticker.run(lambda snap: live.update(render(snap)), ticks=ticks)
    except KeyboardInterrupt:
        ticker.stop()


@main.command()
@click.pass_context
def forecast(ctx: click.Context) -> None:
    """Recompute and store the completion forecast of every goal."""
    ledger = _ledger(ctx)
    result = ledger.refresh_forecasts()
    if not result.success:
        _fail(result.message)

    if ctx.obj["quiet"]:
        for goal_id, when in result.updated.items():
            click.echo(f"{goal_id}\t{when.isoformat() if when else '-'}")
    else:
        names = {g.id: g.name for g in ledger.goals()}
        console = ctx.obj["console"]
        console.print(f"[bold blue]{result.message}[/bold blue]")
        for goal_id, when in result.updated.items():
            console.print(
                f"  {names.get(goal_id, goal_id)}: "
                f"{when.isoformat() if when else 'not reachable at current funding'}"
            )
    for goal_id in result.failed:
        click.echo(f"Warning: forecast update failed for goal {goal_id}", err=True)


@main.command()
@click.pass_context
def allocation(ctx: click.Context) -> None:
    """Monthly income versus what the goals draw from it."""
    ledger = _ledger(ctx)
    status = ledger.allocation_status()
    if status.error:
        click.echo(f"Warning: {status.error}", err=True)

    lines = [
        f"Monthly income: {_money(ctx, status.total_monthly_income)}",
        f"Allocated to goals: {_money(ctx, status.allocated_monthly)}",
        f"Unallocated: {_money(ctx, status.unallocated_monthly)}",
    ]
    if ctx.obj["quiet"]:
        for line in lines:
            click.echo(line)
    else:
        from rich.panel import Panel

        ctx.obj["console"].print(Panel("\n".join(lines), title="Allocation"))
    if status.is_over_allocated:
        click.echo("Warning: goals draw more than the total monthly income", err=True)


@main.command()
@click.option("--period", "-p", type=click.Choice(list(REPORT_PERIODS)),
              default=DEFAULT_REPORT_PERIOD, show_default=True)
@click.option("--plot", "plot_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Save a chart of the report to this file")
@click.pass_context
def report(ctx: click.Context, period: str, plot_path: Optional[Path]) -> None:
    """
    Monthly income over a report period.

    Example:
        incomeflow report --period thisYear --plot income.png
    """
    from .reports import income_breakdown, monthly_income_report

    ledger = _ledger(ctx)
    try:
        sources = ledger.income_sources()
    except IncomeFlowError as e:
        _fail(str(e))

    series = monthly_income_report(sources, period)
    breakdown = income_breakdown(sources)

    if ctx.obj["quiet"]:
        for month, value in series.items():
            click.echo(f"{month.strftime('%Y-%m')}\t{value:.2f}")
    else:
        from rich.table import Table

        console = ctx.obj["console"]
        table = Table(title=f"Monthly income ({period})", show_header=True)
        table.add_column("Month", style="cyan")
        table.add_column("Income", style="green", justify="right")
        for month, value in series.items():
            table.add_row(month.strftime("%Y-%m"), _money(ctx, value))
        table.add_row("[bold]Total[/bold]", f"[bold]{_money(ctx, series.sum())}[/bold]")
        console.print(table)

        if not breakdown.empty:
            sources_table = Table(title="By source", show_header=True)
            sources_table.add_column("Source", style="cyan")
            sources_table.add_column("Monthly", justify="right")
            sources_table.add_column("Share", justify="right")
            for name, row in breakdown.iterrows():
                sources_table.add_row(name, _money(ctx, row["monthly"]), f"{row['share']:.1f}%")
            console.print(sources_table)

    if plot_path is not None:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from .plotting import plot_monthly_income

        fig, _ = plot_monthly_income(
            series, title=f"Monthly income ({period})", save_path=str(plot_path), return_fig_ax=True
        )
        plt.close(fig)
        if not ctx.obj["quiet"]:
            click.echo(f"Chart saved to {plot_path}")


if __name__ == "__main__":
    main()
