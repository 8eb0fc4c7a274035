from showcase.presets.loader import (
    LoadedPreset,
    MainConfig,
    Presets,
    framework_preset,
    load_all_presets,
    load_main_config,
    register_preset,
    resolve_addon_name,
    unregister_preset,
)

__all__ = [
    "LoadedPreset",
    "MainConfig",
    "Presets",
    "framework_preset",
    "load_all_presets",
    "load_main_config",
    "register_preset",
    "resolve_addon_name",
    "unregister_preset",
]
