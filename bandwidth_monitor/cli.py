"""Command-line interface for bandwidth monitor."""

import argparse
import logging
import signal
import sys
import time
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.live import Live
from rich.text import Text
from rich import box

from . import __version__
from .config import BACKENDS, MonitorConfig
from .collection.collector import ParallelCollector
from .collection.platform_source import CounterSource, get_counter_source
from .errors import MonitorError
from .network.public_ip import PublicIpResolver, TtlCache
from .session.driver import QueueInputSource, SessionDriver
from .session.session import Command, MonitoringSession
from .utils.format import format_bits_per_sec, format_bytes, format_bytes_per_sec, sparkline


console = Console()
logger = logging.getLogger("bandwidth_monitor")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
COMMANDS = ("list", "monitor", "simple")
TOP_LEVEL_ARGS = COMMANDS + ("-h", "--help", "--version")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure root logging once for the whole process."""
    handlers = []
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    else:
        handlers.append(logging.StreamHandler(sys.stderr))

    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
        handlers=handlers,
    )


def load_config(args) -> MonitorConfig:
    """Load the config file and apply command-line overrides."""
    config = MonitorConfig.load(getattr(args, "config", None))

    if getattr(args, "interval", None) is not None:
        config.sampling.update_interval = args.interval
    if getattr(args, "backend", None):
        config.collector.backend = args.backend
    if getattr(args, "sequential", False):
        config.collector.parallel = False
    if getattr(args, "no_public_ip", False):
        config.public_ip.enabled = False

    errors = config.validate()
    if errors:
        raise MonitorError("; ".join(errors))
    return config


def build_session(config: MonitorConfig, source: Optional[CounterSource] = None) -> MonitoringSession:
    """Create the counter source, collector and session from config."""
    source = source or get_counter_source(config.collector.backend)
    collector = ParallelCollector(
        source,
        parallel=config.collector.parallel,
        max_workers=config.collector.max_workers or None,
    )
    return MonitoringSession(source, config=config, collector=collector)


def build_resolver(config: MonitorConfig) -> Optional[PublicIpResolver]:
    if not config.public_ip.enabled:
        return None
    return PublicIpResolver(
        cache=TtlCache(ttl=config.public_ip.ttl),
        timeout=config.public_ip.timeout,
    )


def list_interfaces(args) -> None:
    """List available network interfaces."""
    config = load_config(args)
    source = get_counter_source(config.collector.backend)
    interfaces = source.list_interfaces()

    table = Table(title="Available Network Interfaces", box=box.ROUNDED)
    table.add_column("#", justify="right")
    table.add_column("Interface", style="bold cyan")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("MAC Address")
    table.add_column("IP Address")
    table.add_column("Speed", justify="right")

    for info in interfaces:
        status = "UP" if info.is_up else "DOWN"
        status_style = "green" if info.is_up else "red"

        table.add_row(
            str(info.index),
            info.display_name,
            info.kind,
            Text(status, style=status_style),
            info.mac_address or "N/A",
            info.primary_address or "N/A",
            format_bits_per_sec(info.speed_bps) if info.speed_bps else "N/A",
        )

    console.print(table)
    console.print("[dim]Type: P = physical, V = virtual, L = loopback[/dim]")

    info = source.get_platform_info()
    console.print(
        f"[dim]{info['system']} {info['release']} ({info['machine']}), "
        f"Python {info['python_version']}, backend {info['backend']}[/dim]"
    )


def run_monitor(args) -> None:
    """Run the full-screen dashboard."""
    from .ui.dashboard import BandwidthDashboard

    config = load_config(args)
    session = build_session(config)

    if args.interface and not session.select_interface(args.interface):
        raise MonitorError(f"Interface {args.interface} is not an active interface")

    resolver = build_resolver(config)
    if resolver is not None:
        resolver.refresh_async()

    app = BandwidthDashboard(
        session,
        resolver=resolver,
        poll_interval=config.sampling.poll_interval,
        show_chart=config.dashboard.show_chart,
    )
    try:
        app.run()
    finally:
        session.stop()


def make_rates_table(session: MonitoringSession, elapsed: float) -> Table:
    """Create Rich table with the latest rates of every active interface."""
    table = Table(
        title="Interface Bandwidth",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("Interface", style="bold")
    table.add_column("Download", justify="right", style="green")
    table.add_column("Upload", justify="right", style="red")
    table.add_column("Received", justify="right")
    table.add_column("Sent", justify="right")
    table.add_column("History")

    selected = session.selected_interface.index
    for iface in session.active_interfaces:
        history = session.history_for(iface.index)
        snapshot = session.snapshot_for(iface.index)
        latest = history.latest or (0.0, 0.0)
        name = iface.name + (" *" if iface.index == selected else "")

        table.add_row(
            name,
            format_bytes_per_sec(latest[0]),
            format_bytes_per_sec(latest[1]),
            format_bytes(snapshot.bytes_received) if snapshot else "-",
            format_bytes(snapshot.bytes_sent) if snapshot else "-",
            sparkline(history.download_rates, history.max_download_rate, 20),
        )

    stats = session.collector.get_stats()
    table.caption = (
        f"Elapsed: {elapsed:.0f}s | Collections: {stats.collections:,}"
        f" | Failed reads: {stats.failed_reads:,} | Ctrl+C to quit"
    )
    return table


def run_simple(args) -> None:
    """Rich live table driven by the session loop."""
    config = load_config(args)
    session = build_session(config)
    if args.interface and not session.select_interface(args.interface):
        raise MonitorError(f"Interface {args.interface} is not an active interface")

    input_source = QueueInputSource()

    def signal_handler(sig, frame):
        input_source.push(Command.QUIT)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    start = time.monotonic()
    with Live(console=console, refresh_per_second=4) as live:

        def render(s: MonitoringSession) -> None:
            elapsed = time.monotonic() - start
            if args.duration > 0 and elapsed >= args.duration:
                input_source.push(Command.QUIT)
            live.update(make_rates_table(s, elapsed))

        driver = SessionDriver(
            session,
            input_source,
            render=render,
            poll_interval=config.sampling.poll_interval,
        )
        driver.run()

    console.print("[yellow]Monitoring stopped.[/yellow]")


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config", help="Path to YAML config file")
    parser.add_argument("-i", "--interface", help="Interface to select first")
    parser.add_argument("--interval", type=float, help="Seconds between samples")
    parser.add_argument("--no-public-ip", action="store_true", help="Do not look up the public IP")
    parser.add_argument("--sequential", action="store_true", help="Read interfaces one at a time")
    parser.add_argument("--backend", choices=BACKENDS, help="Counter source backend")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    parser.add_argument("--log-file", help="Write logs to this file")


def main(argv=None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="bandwidth-monitor",
        description="Live per-interface bandwidth monitor.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    list_parser = subparsers.add_parser("list", help="List available network interfaces")
    list_parser.add_argument("-c", "--config", help="Path to YAML config file")
    list_parser.add_argument("--backend", choices=BACKENDS, help="Counter source backend")
    list_parser.add_argument("--log-level", default="WARNING", help="Logging level")
    list_parser.add_argument("--log-file", help="Write logs to this file")

    monitor_parser = subparsers.add_parser("monitor", help="Full-screen bandwidth dashboard")
    _add_common_options(monitor_parser)

    simple_parser = subparsers.add_parser("simple", help="Live table of all active interfaces")
    _add_common_options(simple_parser)
    simple_parser.add_argument(
        "-d", "--duration",
        type=int,
        default=0,
        help="Run for this many seconds (0 = until interrupted)",
    )

    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv or argv[0] not in TOP_LEVEL_ARGS:
        # monitor is the default command
        argv.insert(0, "monitor")
    args = parser.parse_args(argv)

    if args.command == "monitor" and not args.log_file:
        # The dashboard owns the terminal
        setup_logging("WARNING")
    else:
        setup_logging(args.log_level, args.log_file)

    commands = {
        "list": list_interfaces,
        "monitor": run_monitor,
        "simple": run_simple,
    }

    try:
        commands[args.command](args)
    except MonitorError as e:
        logger.debug("Fatal error", exc_info=True)
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/yellow]")


if __name__ == "__main__":
    main()
