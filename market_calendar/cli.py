# Simple CLI for the market calendar
from datetime import date, datetime, timezone

import click

from market_calendar.config.settings import Settings
from market_calendar.data.loader import load_default_snapshot
from market_calendar.hours.engine import TradingCalendar
from market_calendar.logging import configure_logging
from market_calendar.utils.exceptions import MarketCalendarException


def _parse_instant(value):
    if value is None:
        return datetime.now(timezone.utc)
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"not an ISO-8601 datetime: {value}") from None


def _parse_date(value):
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"not an ISO date (YYYY-MM-DD): {value}") from None


@click.group()
@click.option("--snapshot", default=None, help="Calendar snapshot identifier (default: current)")
@click.pass_context
def cli(ctx, snapshot):
    """Market Calendar CLI"""
    settings = Settings()
    configure_logging(settings)
    try:
        registry, store = load_default_snapshot(settings)
        overrides = store.get(snapshot)
    except (MarketCalendarException, OSError, ValueError) as e:
        raise click.ClickException(str(e))
    ctx.obj = TradingCalendar(overrides, registry=registry, settings=settings.calendar)


@cli.command()
@click.argument("symbol")
@click.option("--at", "at", default=None, help="ISO-8601 instant (default: now)")
@click.pass_obj
def status(calendar, symbol, at):
    """Show whether SYMBOL is open at an instant"""
    moment = _parse_instant(at)
    try:
        state = calendar.status_at(symbol, moment)
        trading_date = calendar.trading_date_for(symbol, moment)
    except MarketCalendarException as e:
        raise click.ClickException(e.message)
    click.echo(f"{symbol}: {state.value} (trading date {trading_date.isoformat()})")


@cli.command()
@click.argument("symbol")
@click.option("--date", "on", default=None, help="Trading date YYYY-MM-DD (default: today)")
@click.pass_obj
def hours(calendar, symbol, on):
    """Show the resolved session of SYMBOL on a date"""
    d = _parse_date(on) if on else date.today()
    try:
        window = calendar.trading_window(symbol, d)
        adjustments = calendar.regularly_adjusts_trading_hours_on(symbol, d)
        early = calendar.closes_early_on(symbol, d)
        late = calendar.opens_late_on(symbol, d)
    except MarketCalendarException as e:
        raise click.ClickException(e.message)

    if window is None:
        exchange = calendar.registry.get(symbol)
        holiday = calendar.overrides.holiday_for(exchange.scope_tags, d)
        reason = f"holiday ({holiday})" if holiday else "not a trading day"
        click.echo(f"{symbol} {d.isoformat()}: closed, {reason}")
        return

    click.echo(f"{symbol} {d.isoformat()}")
    click.echo(f"  open:  {window.open.isoformat()}" + ("  (late open)" if late else ""))
    click.echo(f"  close: {window.close.isoformat()}" + ("  (early close)" if early else ""))
    for start, end in window.breaks:
        click.echo(f"  break: {start.isoformat()} - {end.isoformat()}")
    for field, adjustment in sorted(adjustments.items()):
        click.echo(f"  {field}: {adjustment.time_of_day} [{adjustment.rule}]")


@cli.command("next-open")
@click.argument("symbol")
@click.option("--at", "at", default=None, help="ISO-8601 instant (default: now)")
@click.pass_obj
def next_open(calendar, symbol, at):
    """Show when SYMBOL next opens"""
    moment = _parse_instant(at)
    try:
        opening = calendar.next_open_at(symbol, moment)
    except MarketCalendarException as e:
        raise click.ClickException(e.message)
    if opening is None:
        click.echo(f"{symbol}: already open")
    else:
        click.echo(f"{symbol}: opens {opening.isoformat()}")


@cli.command()
@click.argument("scope")
@click.option("--start", required=True, help="First date YYYY-MM-DD (inclusive)")
@click.option("--end", required=True, help="Last date YYYY-MM-DD (inclusive)")
@click.pass_obj
def holidays(calendar, scope, start, end):
    """List holidays for a scope tag (symbol, category or country)"""
    found = calendar.overrides.holidays_in_range(scope, _parse_date(start), _parse_date(end))
    if not found:
        click.echo(f"No holidays for {scope}")
        return
    for d, name in found:
        click.echo(f"{d.isoformat()}  {name}")


if __name__ == "__main__":
    cli()
