from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from iconsync import __version__, run_sync
from iconsync.core.config import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    init_config,
    load_config,
    load_optimize_config,
)
from iconsync.core.errors import ConfigError, IconsSyncError
from iconsync.core.logging_setup import setup_logging
from iconsync.providers.figma import extract_ids_from_link
from iconsync.sync import EventKind, InventoryStore, LocalFileStore, NotificationEvent, RunResult

app = typer.Typer(add_completion=False, help="Sync SVG icons from a Figma frame into a local folder.")
console = Console()
err_console = Console(stderr=True)

EVENT_BADGES: dict[EventKind, list[tuple[str, str]]] = {
    EventKind.RENAMED_UNABLE_TO_SAVE: [("WARNING", "black on yellow"), ("UNABLE TO SAVE", "black on yellow")],
    EventKind.UNABLE_TO_SAVE: [("WARNING", "black on yellow"), ("UNABLE TO SAVE", "black on yellow")],
    EventKind.RENAMED_SAVED_BOTH: [("WARNING", "black on yellow")],
    EventKind.RENAME_REMINDER: [("REMINDER", "black on white")],
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _apply_overrides(cfg: AppConfig, **sections: dict[str, Any]) -> AppConfig:
    """Return a copy of cfg with non-None values replaced, section by section."""
    update: dict[str, Any] = {}
    for section, values in sections.items():
        changed = {k: v for k, v in values.items() if v is not None}
        if changed:
            update[section] = getattr(cfg, section).model_copy(update=changed)
    return cfg.model_copy(update=update) if update else cfg


def _render_event(event: NotificationEvent) -> None:
    badges = Text(" ").join(Text(f" {label} ", style=style) for label, style in EVENT_BADGES[event.kind])
    console.print(badges)
    console.print(event.message)
    *old_files, new_file = event.filenames
    if old_files:
        console.print(Text("Old name: ", style="grey50") + Text(", ".join(old_files)))
    console.print(Text("New name: ", style="grey50") + Text(new_file))


def _render_result(result: RunResult) -> None:
    table = Table(title="Icons changelog")
    table.add_column("Change")
    table.add_column("Count", justify="right")
    table.add_column("Files")
    for category in ("added", "modified", "restored", "removed", "unmodified"):
        names = result.changelog.get(category, [])
        shown = "" if category == "unmodified" else ", ".join(names)
        table.add_row(category, str(len(names)), shown)
    console.print(table)
    console.print(f"Downloaded: {result.total_fetches}")
    for event in result.events:
        _render_event(event)


@app.command()
def sync(
    link: Optional[str] = typer.Argument(None, help="Link to the Figma frame containing the icons."),
    token: Optional[str] = typer.Option(None, "--token", "-t", help="Figma API token."),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output folder."),
    ignore_subfolders: Optional[bool] = typer.Option(
        None,
        "--ignore-subfolders/--keep-subfolders",
        help='Save "socials/facebook" as "socials_facebook.svg".',
    ),
    optimize_config: Optional[str] = typer.Option(None, "--optimize-config", help="scour options file (.json)."),
    monochrome_colors: Optional[str] = typer.Option(
        None,
        "--monochrome-colors",
        help="Comma-separated colours that make a single-colour icon monochrome.",
    ),
    remove_fill: Optional[bool] = typer.Option(None, "--remove-fill/--keep-fill", help="Strip fill from monochrome icons."),
    remove_stroke: Optional[bool] = typer.Option(
        None, "--remove-stroke/--keep-stroke", help="Strip stroke from monochrome icons."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Re-fetch every icon ignoring the local inventory."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print critical errors."),
    json_output: bool = typer.Option(False, "--json", help="Print the run result as JSON."),
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Config file."),
):
    """Run one sync and print the changelog."""
    try:
        cfg = load_config(config)
        colors = [c.strip() for c in monochrome_colors.split(",") if c.strip()] if monochrome_colors else None
        cfg = _apply_overrides(
            cfg,
            auth={"api_token": token},
            figma={"link": link},
            sync={"output_dir": output, "ignore_subfolders": ignore_subfolders, "optimize_config": optimize_config},
            monochrome={"colors": colors, "remove_fill": remove_fill, "remove_stroke": remove_stroke},
        )
        setup_logging(cfg.logging.level, cfg.logging.file, console_level="ERROR" if quiet or json_output else None)

        result = run_sync(cfg, force=force)
    except IconsSyncError as e:
        err_console.print(Text(" Sync Error ", style="white on red"), Text(str(e)))
        if e.details:
            err_console.print(Text(json.dumps(e.details, ensure_ascii=False, default=str)))
        raise typer.Exit(2)

    if json_output:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    elif not quiet:
        _render_result(result)


@app.command("config-show")
def config_show(config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c")):
    """Show the effective config (token masked)."""
    try:
        cfg = load_config(config)
    except ConfigError as e:
        err_console.print(Text(" Config Error ", style="white on red"), Text(str(e)))
        raise typer.Exit(2)
    data = cfg.model_dump()
    if data["auth"]["api_token"]:
        data["auth"]["api_token"] = "***"
    print(json.dumps(data, ensure_ascii=False, indent=2))


@app.command("config-init")
def config_init(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Replace an existing file."),
):
    """Write a starter config file."""
    if config.exists() and not overwrite:
        err_console.print(f"{config} already exists (use --overwrite)")
        raise typer.Exit(1)
    init_config(config)
    print(f"OK: {config}")


@app.command("config-validate")
def config_validate(
    config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c"),
    strict: bool = typer.Option(False, "--strict", help="Return non-zero when validation fails."),
):
    """Validate config and sync prerequisites."""
    out: dict[str, Any] = {
        "ok": True,
        "checked_at": _now_iso(),
        "config_path": str(config),
        "checks": {
            "config_exists": config.exists(),
            "api_token_configured": False,
            "figma_link_valid": False,
            "optimize_config_valid": False,
            "inventory_readable": False,
        },
        "warnings": [],
        "errors": [],
    }

    try:
        cfg = load_config(config)
    except ConfigError as e:
        out["ok"] = False
        out["errors"].append(str(e))
        print(json.dumps(out, ensure_ascii=False, indent=2))
        if strict:
            raise typer.Exit(2)
        return

    out["checks"]["api_token_configured"] = bool(cfg.auth.api_token)
    if not cfg.auth.api_token:
        out["errors"].append("api_token_missing")

    try:
        extract_ids_from_link(cfg.figma.link)
        out["checks"]["figma_link_valid"] = True
    except ConfigError as e:
        out["errors"].append(str(e))

    try:
        load_optimize_config(cfg.sync.optimize_config)
        out["checks"]["optimize_config_valid"] = True
    except ConfigError as e:
        out["errors"].append(str(e))

    inventory = InventoryStore(
        LocalFileStore(cfg.sync.output_dir), cfg.sync.inventory_file, cfg.sync.legacy_inventory_file
    )
    try:
        if inventory.load() is None:
            out["warnings"].append("inventory_missing: next sync is a first run")
        out["checks"]["inventory_readable"] = True
    except IconsSyncError as e:
        out["errors"].append(str(e))

    out["ok"] = len(out["errors"]) == 0
    print(json.dumps(out, ensure_ascii=False, indent=2))
    if strict and not out["ok"]:
        raise typer.Exit(2)


@app.command()
def status(config: Path = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c")):
    """Show output folder and inventory summary."""
    try:
        cfg = load_config(config)
    except ConfigError as e:
        err_console.print(Text(" Config Error ", style="white on red"), Text(str(e)))
        raise typer.Exit(2)

    store = LocalFileStore(cfg.sync.output_dir)
    inventory = InventoryStore(store, cfg.sync.inventory_file, cfg.sync.legacy_inventory_file)
    try:
        records = inventory.load()
        records_text = "(none yet)" if records is None else str(len(records))
        renamed_text = "-" if records is None else str(sum(1 for r in records if r.previous_names))
    except IconsSyncError as e:
        records_text = f"invalid: {e}"
        renamed_text = "-"

    table = Table(title=f"icons-sync {__version__} status")
    table.add_column("Key")
    table.add_column("Value")
    table.add_row("config", str(config))
    table.add_row("figma_link", cfg.figma.link or "(unset)")
    table.add_row("api_token", "set" if cfg.auth.api_token else "(unset)")
    table.add_row("output_dir", str(store.root))
    table.add_row("ignore_subfolders", "yes" if cfg.sync.ignore_subfolders else "no")
    inventory_path = store.root / cfg.sync.inventory_file
    table.add_row("inventory", str(inventory_path) if inventory.exists() else f"{inventory_path} (missing)")
    table.add_row("records", records_text)
    table.add_row("with_old_names", renamed_text)
    table.add_row("log", cfg.logging.file or "(console)")
    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
