from showcase.builders.base import Builder, BuilderPair, build_or_throw
from showcase.builders.registry import (
    get_builders,
    register_builder,
    resolve_builder,
    unregister_builder,
)

__all__ = [
    "Builder",
    "BuilderPair",
    "build_or_throw",
    "get_builders",
    "register_builder",
    "resolve_builder",
    "unregister_builder",
]
