from __future__ import annotations

from typing import Any

_EXAMPLE_TITLE_PREFIX = "example/"


def _is_example(entry: dict[str, Any]) -> bool:
    return str(entry.get("title", "")).lower().startswith(_EXAMPLE_TITLE_PREFIX)


def summarize_index(index: dict[str, Any]) -> dict[str, Any]:
    """Reduce a content index to the counts reported with the build event.

    Example entries (titles under ``Example/``) are counted separately so
    that starter content does not inflate the project's own numbers.
    """
    story_count = 0
    example_story_count = 0
    example_docs_count = 0
    play_story_count = 0
    autodocs_count = 0
    mdx_count = 0
    components: set[str] = set()

    for entry in index.get("entries", {}).values():
        if _is_example(entry):
            if entry.get("type") == "story":
                example_story_count += 1
            else:
                example_docs_count += 1
            continue

        if entry.get("type") == "story":
            story_count += 1
            components.add(entry.get("title", ""))
            if entry.get("play"):
                play_story_count += 1
        elif "autodocs" in entry.get("tags", []):
            autodocs_count += 1
        else:
            mdx_count += 1

    return {
        "story_count": story_count,
        "component_count": len(components),
        "play_story_count": play_story_count,
        "autodocs_count": autodocs_count,
        "mdx_count": mdx_count,
        "example_story_count": example_story_count,
        "example_docs_count": example_docs_count,
        "version": index.get("v"),
    }
