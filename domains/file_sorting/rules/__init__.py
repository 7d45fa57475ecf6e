"""Rule catalog for extension-based classification."""

from domains.file_sorting.rules.catalog import RuleCatalog, load_catalog, render_target_folder
from domains.file_sorting.rules.defaults import DEFAULT_RULES

__all__ = ["DEFAULT_RULES", "RuleCatalog", "load_catalog", "render_target_folder"]
