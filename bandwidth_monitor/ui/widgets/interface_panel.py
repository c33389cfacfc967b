"""Interface header panel widget."""

from textual.widgets import Static
from rich.markup import escape
from typing import Optional

from ...network.public_ip import is_private_ip
from ...session.session import SessionView
from ...utils.format import format_bits_per_sec, format_bytes


def public_ip_markup(ip: Optional[str]) -> str:
    """Public IP for display, flagging an answer from a private range."""
    if not ip:
        return "[dim]unknown[/dim]"
    if is_private_ip(ip):
        return f"[yellow]{ip} (private)[/yellow]"
    return f"[white]{ip}[/white]"


class InterfacePanel(Static):
    """Header showing identity and totals of the selected interface."""

    DEFAULT_CSS = """
    InterfacePanel {
        height: auto;
        padding: 0 1;
        background: $surface;
    }
    """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._view: Optional[SessionView] = None
        self._public_ip: Optional[str] = None
        self._show_public_ip = True

    def update_view(self, view: SessionView, public_ip: Optional[str] = None,
                    show_public_ip: bool = True) -> None:
        """Update displayed interface."""
        self._view = view
        self._public_ip = public_ip
        self._show_public_ip = show_public_ip
        self.refresh()

    def render(self) -> str:
        """Render the panel content."""
        if not self._view:
            return "[dim]Waiting for data...[/dim]"

        v = self._view
        iface = v.interface

        title = (
            f"[bold cyan]{escape(iface.display_name)}[/bold cyan] "
            f"[dim]({v.position}/{v.active_count})[/dim]"
        )
        if iface.is_virtual:
            title += " [yellow]virtual[/yellow]"
        lines = [title]

        speed = format_bits_per_sec(iface.speed_bps) if iface.speed_bps else "unknown"
        mac = iface.mac_address or "n/a"
        ip = iface.primary_address or "n/a"
        lines.append(f"  Speed: [white]{speed}[/white]   MAC: [white]{mac}[/white]")

        ip_line = f"  IP: [white]{escape(ip)}[/white]"
        if self._show_public_ip:
            ip_line += f"   Public IP: {public_ip_markup(self._public_ip)}"
        lines.append(ip_line)

        if v.snapshot is not None:
            lines.append(
                f"  Total: [green]↓ {format_bytes(v.snapshot.bytes_received)}[/green]"
                f"   [red]↑ {format_bytes(v.snapshot.bytes_sent)}[/red]"
            )

        if v.last_update is not None:
            lines.append(f"  [dim]Updated {v.last_update.strftime('%H:%M:%S')}[/dim]")

        return "\n".join(lines)
