from __future__ import annotations

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from iconsync.core.errors import ConfigError

DEFAULT_CONFIG_PATH = Path("icons-sync.yaml")
DEFAULT_CONFIG_TEMPLATE_PATH = Path(__file__).resolve().parents[2] / "icons-sync.yaml.example"


class FigmaAuthConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_token: str = ""
    timeout_sec: int = Field(default=30, ge=1, le=600)


class FigmaConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Link to the frame holding the icons, e.g.
    # https://www.figma.com/file/<fileId>/<title>?node-id=12-34
    link: str = ""
    api_base: str = "https://api.figma.com/v1"
    image_batch_size: int = Field(default=100, ge=1, le=500)


class SyncConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_dir: str = "./icons"
    # When enabled, "socials/facebook" is saved as "socials_facebook.svg"
    # instead of "socials/facebook.svg".
    ignore_subfolders: bool = False
    inventory_file: str = "_icons.json"
    legacy_inventory_file: str = "_icons.js"
    # Optional JSON file with SVG optimizer settings; empty means defaults.
    optimize_config: str = ""


class MonochromeConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    colors: list[str] = Field(default_factory=lambda: ["black", "000000"])
    remove_fill: bool = False
    remove_stroke: bool = False


class OptimizeConfig(BaseModel):
    """scour options; field names are scour's own option names."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    digits: int = Field(default=5, ge=1, le=12)
    cdigits: int = -1
    simple_colors: bool = True
    style_to_xml: bool = True
    group_collapse: bool = True
    group_create: bool = False
    keep_editor_data: bool = False
    keep_defs: bool = False
    renderer_workaround: bool = True
    strip_xml_prolog: bool = True
    strip_comments: bool = True
    remove_titles: bool = True
    remove_descriptions: bool = True
    remove_metadata: bool = True
    # viewBox is never dropped; this only replaces width/height with 100%.
    enable_viewboxing: bool = False
    strip_ids: bool = True
    shorten_ids: bool = False
    indent_type: Literal["none", "space", "tab"] = "none"
    indent_depth: int = Field(default=1, ge=0)
    newlines: bool = False
    strip_xml_space_attribute: bool = True


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    # Empty means console only.
    file: str = ""


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    auth: FigmaAuthConfig = Field(default_factory=FigmaAuthConfig)
    figma: FigmaConfig = Field(default_factory=FigmaConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    monochrome: MonochromeConfig = Field(default_factory=MonochromeConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _dump_yaml(cfg: AppConfig) -> str:
    import yaml

    return yaml.safe_dump(cfg.model_dump(), allow_unicode=True, sort_keys=False)


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    import yaml

    if not path.exists():
        return AppConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"config_yaml_invalid: {path}", details={"error": str(e)}) from e
    if not isinstance(data, dict):
        raise ConfigError(f"config_not_a_mapping: {path}")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"config_invalid: {path}", details={"errors": e.errors()}) from e


def init_config(path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Write a starter config file (from the bundled template when present)."""
    import yaml

    path.parent.mkdir(parents=True, exist_ok=True)
    if DEFAULT_CONFIG_TEMPLATE_PATH.exists():
        try:
            template_text = DEFAULT_CONFIG_TEMPLATE_PATH.read_text(encoding="utf-8")
            cfg = AppConfig.model_validate(yaml.safe_load(template_text) or {})
            path.write_text(template_text, encoding="utf-8")
            return cfg
        except (yaml.YAMLError, ValidationError):
            pass

    cfg = AppConfig()
    save_config(cfg, path)
    return cfg


def save_config(cfg: AppConfig, path: Path = DEFAULT_CONFIG_PATH):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_dump_yaml(cfg), encoding="utf-8")


def load_optimize_config(path: str) -> OptimizeConfig:
    """Read scour settings from a JSON object file.

    Keys are scour option names (``digits``, ``strip_comments``, ...); missing
    keys keep the defaults. An empty path yields the defaults. Anything else
    that is not an existing ``.json`` file holding a valid object is a
    configuration error.
    """
    if not path:
        return OptimizeConfig()

    p = Path(path)
    if p.suffix.lower() != ".json":
        raise ConfigError(f"optimize_config_not_json: {path}")
    if not p.exists():
        raise ConfigError(f"optimize_config_missing: {path}")

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"optimize_config_invalid_json: {path}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"optimize_config_not_an_object: {path}")

    try:
        return OptimizeConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"optimize_config_invalid: {path}", details={"errors": e.errors()}) from e
