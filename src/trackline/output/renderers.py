"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from trackline.output.console import create_console, get_output

if TYPE_CHECKING:
    from rich.console import Console

    from trackline.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: participant names only."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        return "\n".join(str(item["participant"]) for item in items if "participant" in item)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="tl.ok")
    op = Text(f"  {result.op}", style="tl.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="tl.key")
    if key.endswith(("_file", "path")):
        v = Text(str(value), style="tl.path")
    else:
        v = Text(str(value))
    console.print(k, v, end="")
    console.print()


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including the telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    name = span_data.get("name", "?")
    duration = span_data.get("duration_ms", 0.0)
    style = "yellow" if duration > 100 else "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {name}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


def _format_number(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:.2f}".rstrip("0").rstrip(".")
    return str(value)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="tl.error")
    op = Text(f"  {result.op}", style="tl.op")
    code = Text(f" [{err.code}]", style="dim") if err else Text("")
    console.print(label, op, code, Text(" — "), Text(msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Operation renderers ───────────────────────────────────────────────


def _render_tracks(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render tracks as a table, busiest participant first."""
    d = result.data
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Participant", style="tl.participant", no_wrap=True)
    table.add_column("Count", style="tl.count", justify="right")
    table.add_column("Interactions", style="tl.partner")

    for index, item in enumerate(d.get("items", []), start=1):
        interactions = ", ".join(f"{i['partner']}@{i['order']}" for i in item["interactions"])
        table.add_row(
            str(index),
            Text(item["participant"]),
            str(item["interaction_count"]),
            Text(interactions),
        )

    console.print(table)
    console.print(
        f"\n{d.get('count', 0)} tracks from {d.get('events', 0)} events"
        f" (strategy={d.get('strategy')}, minimum={d.get('minimum_interaction_count')})"
    )
    if verbose:
        _render_meta(console, result)


def _render_layout(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render layout geometry as grouped fields."""
    d = result.data
    _status_line(console, result)
    for key in (
        "tracks",
        "outer_width",
        "outer_height",
        "inner_width",
        "inner_height",
        "radius",
        "stroke_width",
        "label_height",
        "label_width",
    ):
        if key in d:
            _field(console, key, _format_number(d[key]))

    margin = d.get("margin")
    if margin:
        sides = " ".join(f"{side}={_format_number(margin[side])}" for side in margin)
        _field(console, "margin", sides)
    if "order_extent" in d:
        low, high = d["order_extent"]
        _field(console, "order_extent", f"{low}..{high}")
    if verbose:
        for key in ("x_ratio", "y_ratio", "x_scale", "y_scale", "viewport"):
            if key in d:
                _field(console, key, d[key])
        _render_meta(console, result)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _status_line(console, result)
    for key in ("rows", "events", "participants"):
        if key in d:
            _field(console, key, d[key])
    if "order_extent" in d:
        low, high = d["order_extent"]
        _field(console, "order_extent", f"{low}..{high}")
    if "columns" in d:
        _field(console, "columns", ", ".join(d["columns"]))
    if verbose:
        _render_meta(console, result)


def _render_render(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render the summary of a written drawing (content itself is omitted)."""
    d = result.data
    _status_line(console, result)
    for key in ("format", "output_file", "tracks", "width", "height"):
        if key in d:
            _field(console, key, _format_number(d[key]))
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "tracks": _render_tracks,
    "layout": _render_layout,
    "check": _render_check,
    "render": _render_render,
}
