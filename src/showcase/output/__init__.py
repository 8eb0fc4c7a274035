"""Writers that populate the output directory."""
from showcase.output.assets import copy_bundled_assets
from showcase.output.guard import prepare_output_dir, resolve_output_dir
from showcase.output.metadata import extract_project_metadata
from showcase.output.static_files import copy_all_static_files
from showcase.output.stats import output_stats
from showcase.output.stories_json import extract_stories_json

__all__ = [
    "copy_all_static_files",
    "copy_bundled_assets",
    "extract_project_metadata",
    "extract_stories_json",
    "output_stats",
    "prepare_output_dir",
    "resolve_output_dir",
]
