from .settings import (
    MODES,
    REPORTS_ARTIFACT,
    Settings,
    StageFlags,
    build_settings,
    container_path,
    load_settings_file,
    parse_generator_list,
)

__all__ = [
    "MODES",
    "REPORTS_ARTIFACT",
    "Settings",
    "StageFlags",
    "build_settings",
    "container_path",
    "load_settings_file",
    "parse_generator_list",
]
