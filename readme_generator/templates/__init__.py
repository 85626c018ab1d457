"""Template fragment discovery and override resolution.

Quick usage::

    from readme_generator.templates import TemplateRegistry, load_templates

    registry = load_templates(TemplateRegistry(), Path("."), views=None)
    registry.find("install-npm")
"""

from readme_generator.templates.loader import apply_views, builtin_path, load_templates
from readme_generator.templates.registry import (
    CATEGORIES,
    GlobSource,
    TemplateFragment,
    TemplateRegistry,
    rename_key,
)

__all__ = [
    "CATEGORIES",
    "GlobSource",
    "TemplateFragment",
    "TemplateRegistry",
    "apply_views",
    "builtin_path",
    "load_templates",
    "rename_key",
]
