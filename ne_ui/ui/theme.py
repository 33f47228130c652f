from __future__ import annotations

RICH_ACCENT = "cyan"
RICH_ACCENT_BOLD = f"bold {RICH_ACCENT}"
RICH_BORDER_STYLE = RICH_ACCENT

RICH_STATUS_COLORS: dict[str, str] = {
    "active": "yellow",
    "completed": "green",
    "archived": "dim",
    "applied": "green",
    "ignored": "yellow",
    "rejected": "magenta",
    "failed": "red",
}

PRESENTER_TEMPLATES: dict[str, str] = {
    "info": "[cyan]ℹ[/cyan] {message}",
    "warning": "[yellow]⚠ {message}[/yellow]",
    "error": "[red]✖ {message}[/red]",
    "success": "[green]✔ {message}[/green]",
}

VARIANT_STYLE = "dim italic"


def status_text(status: str) -> str:
    color = RICH_STATUS_COLORS.get(status)
    if not color:
        return status
    return f"[{color}]{status}[/{color}]"
