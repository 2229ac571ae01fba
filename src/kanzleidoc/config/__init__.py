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

"""Config loaders and installers."""

from .installer import (
    DEFAULT_PAPER_SIZE,
    DEFAULT_TEMPLATE_DIR,
    DEFAULT_TEMPLATE_STYLE,
    TEMPLATE_FILENAMES,
    default_database_url,
    init_user_config,
    list_template_designs,
    resolve_config_path,
    resolve_template_design_path,
    user_config_needs_init,
)
from .loader import (
    DEFAULT_FOOTER_TEXT,
    AppConfig,
    CliDefaults,
    MeasureSettings,
    NumberingSettings,
    UiDefaults,
    apply_template_design,
    load_app_config,
    load_cli_defaults,
)

__all__ = [
    "AppConfig",
    "CliDefaults",
    "DEFAULT_FOOTER_TEXT",
    "DEFAULT_PAPER_SIZE",
    "DEFAULT_TEMPLATE_DIR",
    "DEFAULT_TEMPLATE_STYLE",
    "MeasureSettings",
    "NumberingSettings",
    "TEMPLATE_FILENAMES",
    "UiDefaults",
    "apply_template_design",
    "default_database_url",
    "init_user_config",
    "list_template_designs",
    "load_app_config",
    "load_cli_defaults",
    "resolve_config_path",
    "resolve_template_design_path",
    "user_config_needs_init",
]
