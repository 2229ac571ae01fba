#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.


from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Literal, cast

from ..render.geometry import (
    DEFAULT_FOOTER_HEIGHT_PX,
    DEFAULT_MARGIN_PX,
    PageGeometry,
    geometry_for_paper,
)
from .installer import (
    DEFAULT_PAPER_SIZE,
    DEFAULT_TEMPLATE_DIR,
    default_database_url,
    resolve_config_path,
    resolve_template_design_path,
)

MeasureBackend = Literal["playwright", "text"]
MEASURE_BACKENDS = ("playwright", "text")
DEFAULT_FOOTER_TEXT = "Erstellt am {{AKTUELLES_DATUM}}"


@dataclass(frozen=True)
class MeasureSettings:
    backend: MeasureBackend = "playwright"
    settle_ms: int = 500
    timeout_ms: int = 10_000
    font_size_px: float = 14.0
    line_height: float = 1.4


@dataclass(frozen=True)
class NumberingSettings:
    database_url: str | None = None
    baseline: int = 23975
    width: int = 6
    max_retries: int = 16

    @property
    def resolved_database_url(self) -> str:
        return self.database_url or default_database_url()


@dataclass(frozen=True)
class UiDefaults:
    quiet: bool = False
    no_color: bool = False


@dataclass(frozen=True)
class CliDefaults:
    ui: UiDefaults = field(default_factory=UiDefaults)


@dataclass(frozen=True)
class AppConfig:
    template_dir: Path
    paper_size: str
    geometry: PageGeometry
    measure: MeasureSettings = field(default_factory=MeasureSettings)
    numbering: NumberingSettings = field(default_factory=NumberingSettings)
    footer_text: str = DEFAULT_FOOTER_TEXT
    cli_defaults: CliDefaults = field(default_factory=CliDefaults)

    def template_path(self, doc_type: str) -> Path:
        return self.template_dir / f"{doc_type}.html"


def load_app_config(path: str | Path | None = None, *, paper_size: str | None = None) -> AppConfig:
    config_path = resolve_config_path(path, paper_size=paper_size)
    data = _load_toml(config_path)

    page_cfg = _get_dict(data, "page")
    resolved_paper_size = (
        paper_size or _parse_optional_str(page_cfg.get("size"), field="page.size") or DEFAULT_PAPER_SIZE
    ).upper()
    return AppConfig(
        template_dir=_resolve_template_dir(_get_dict(data, "templates")),
        paper_size=resolved_paper_size,
        geometry=_parse_geometry(page_cfg, paper_size=resolved_paper_size),
        measure=_parse_measure(_get_dict(data, "measure")),
        numbering=_parse_numbering(_get_dict(data, "numbering")),
        footer_text=_parse_footer_text(_get_dict(data, "footer")),
        cli_defaults=_parse_cli_defaults(data),
    )


def load_cli_defaults(path: str | Path | None = None) -> CliDefaults:
    config_path = resolve_config_path(path)
    data = _load_toml(config_path)
    return _parse_cli_defaults(data)


def apply_template_design(config: AppConfig, design: str | None) -> AppConfig:
    if not design:
        return config
    return replace(config, template_dir=resolve_template_design_path(design))


def _parse_cli_defaults(data: dict[str, object]) -> CliDefaults:
    ui_cfg = _get_dict(data, "ui")
    return CliDefaults(
        ui=UiDefaults(
            quiet=_parse_bool(ui_cfg.get("quiet"), field="ui.quiet", default=False),
            no_color=_parse_bool(ui_cfg.get("no_color"), field="ui.no_color", default=False),
        )
    )


def _parse_geometry(cfg: dict[str, object], *, paper_size: str) -> PageGeometry:
    try:
        preset = geometry_for_paper(paper_size)
    except ValueError as exc:
        raise ValueError(f"page.size: {exc}") from exc
    geometry = PageGeometry(
        width_px=_parse_positive_number(cfg.get("width_px"), field="page.width_px", default=preset.width_px),
        height_px=_parse_positive_number(
            cfg.get("height_px"), field="page.height_px", default=preset.height_px
        ),
        margin_px=_parse_non_negative_number(
            cfg.get("margin_px"), field="page.margin_px", default=DEFAULT_MARGIN_PX
        ),
        footer_height_px=_parse_non_negative_number(
            cfg.get("footer_height_px"),
            field="page.footer_height_px",
            default=DEFAULT_FOOTER_HEIGHT_PX,
        ),
    )
    if geometry.usable_height <= 0:
        raise ValueError("page: margins and footer leave no usable height")
    if geometry.content_width <= 0:
        raise ValueError("page: margins leave no usable width")
    return geometry


def _parse_measure(cfg: dict[str, object]) -> MeasureSettings:
    defaults = MeasureSettings()
    backend = _parse_optional_str(cfg.get("backend"), field="measure.backend")
    if backend is None:
        backend = defaults.backend
    backend = backend.strip().lower()
    if backend not in MEASURE_BACKENDS:
        raise ValueError("measure.backend must be 'playwright' or 'text'")
    return MeasureSettings(
        backend=cast(MeasureBackend, backend),
        settle_ms=_parse_non_negative_int(
            cfg.get("settle_ms"), field="measure.settle_ms", default=defaults.settle_ms
        ),
        timeout_ms=_parse_positive_int(
            cfg.get("timeout_ms"), field="measure.timeout_ms", default=defaults.timeout_ms
        ),
        font_size_px=_parse_positive_number(
            cfg.get("font_size_px"), field="measure.font_size_px", default=defaults.font_size_px
        ),
        line_height=_parse_positive_number(
            cfg.get("line_height"), field="measure.line_height", default=defaults.line_height
        ),
    )


def _parse_numbering(cfg: dict[str, object]) -> NumberingSettings:
    defaults = NumberingSettings()
    database_url = _parse_optional_str(cfg.get("database_url"), field="numbering.database_url")
    if database_url is not None:
        database_url = database_url.strip() or None
    return NumberingSettings(
        database_url=database_url,
        baseline=_parse_non_negative_int(
            cfg.get("baseline"), field="numbering.baseline", default=defaults.baseline
        ),
        width=_parse_positive_int(cfg.get("width"), field="numbering.width", default=defaults.width),
        max_retries=_parse_positive_int(
            cfg.get("max_retries"), field="numbering.max_retries", default=defaults.max_retries
        ),
    )


def _parse_footer_text(cfg: dict[str, object]) -> str:
    text = _parse_optional_str(cfg.get("text"), field="footer.text")
    if text is None or not text.strip():
        return DEFAULT_FOOTER_TEXT
    return text.strip()


def _resolve_template_dir(cfg: dict[str, object]) -> Path:
    design = _parse_optional_str(cfg.get("default_name"), field="templates.default_name")
    if design is None:
        return DEFAULT_TEMPLATE_DIR
    if not design.strip():
        raise ValueError("templates.default_name must be a non-empty string")
    try:
        return resolve_template_design_path(design)
    except ValueError as exc:
        raise ValueError(f"templates.default_name: {exc}") from exc


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _parse_optional_str(value: object, *, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    return value


def _parse_bool(value: object, *, field: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"{field} must be a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    raise ValueError(f"{field} must be a boolean")


def _parse_int_strict(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{field} must be an integer")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError as exc:
            raise ValueError(f"{field} must be an integer") from exc
    raise ValueError(f"{field} must be an integer")


def _parse_number_strict(value: object, *, field: str) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError as exc:
            raise ValueError(f"{field} must be a number") from exc
        return int(parsed) if parsed.is_integer() else parsed
    raise ValueError(f"{field} must be a number")


def _parse_positive_int(value: object, *, field: str, default: int) -> int:
    if value is None:
        return default
    parsed = _parse_int_strict(value, field=field)
    if parsed <= 0:
        raise ValueError(f"{field} must be a positive integer")
    return parsed


def _parse_non_negative_int(value: object, *, field: str, default: int) -> int:
    if value is None:
        return default
    parsed = _parse_int_strict(value, field=field)
    if parsed < 0:
        raise ValueError(f"{field} must be zero or a positive integer")
    return parsed


def _parse_positive_number(value: object, *, field: str, default: float) -> float:
    if value is None:
        return default
    parsed = _parse_number_strict(value, field=field)
    if parsed <= 0:
        raise ValueError(f"{field} must be positive")
    return parsed


def _parse_non_negative_number(value: object, *, field: str, default: float) -> float:
    if value is None:
        return default
    parsed = _parse_number_strict(value, field=field)
    if parsed < 0:
        raise ValueError(f"{field} must not be negative")
    return parsed
