"""Ordered rule catalog: maps file extensions to destination folders."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Iterator, Mapping, Optional, Tuple, Union

import yaml
from loguru import logger
from pydantic import ValidationError

from app.models.schemas import Classification, Rule
from app.utils.helpers import normalize_extension
from domains.file_sorting.errors import RuleCatalogError
from domains.file_sorting.rules.defaults import DEFAULT_RULES


class RuleCatalog:
    """Immutable, ordered collection of rules.

    Lookup walks the rules in definition order and returns the first active
    rule claiming the extension, so an extension listed by two rules always
    resolves to the earlier one.
    """

    __slots__ = ("_rules", "_by_id")

    def __init__(self, rules: Iterable[Union[Rule, Mapping[str, Any]]]):
        built: list[Rule] = []
        by_id: dict[str, Rule] = {}

        for position, raw in enumerate(rules):
            try:
                rule = raw if isinstance(raw, Rule) else Rule.model_validate(raw)
            except ValidationError as e:
                raise RuleCatalogError(f"Invalid rule at position {position}: {e}") from e

            if rule.id in by_id:
                raise RuleCatalogError(f"Duplicate rule id: {rule.id!r}")

            _check_template(rule)
            built.append(rule)
            by_id[rule.id] = rule

        self._rules: Tuple[Rule, ...] = tuple(built)
        self._by_id = by_id

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"RuleCatalog({[r.id for r in self._rules]})"

    @property
    def rules(self) -> Tuple[Rule, ...]:
        """All rules in catalog order."""
        return self._rules

    def get(self, rule_id: str) -> Optional[Rule]:
        """Return the rule with ``rule_id`` or None."""
        return self._by_id.get(rule_id)

    def match_extension(self, extension: str) -> Optional[Rule]:
        """
        Find the first rule claiming an extension.

        Args:
            extension: Extension with or without leading dot, any case

        Returns:
            Matching rule, or None when no rule claims the extension
        """
        ext = normalize_extension(extension)
        if not ext:
            return None

        for rule in self._rules:
            if rule.matches(ext):
                return rule
        return None

    def classify(self, path: Union[str, Path], base_dir: Union[str, Path]) -> Classification:
        """
        Classify a file by its extension and resolve its destination folder.

        Args:
            path: File path (only the suffix is used)
            base_dir: Directory that rule target folders are relative to

        Returns:
            Classification; rule and destination are None when unmatched
        """
        path = Path(path)
        ext = normalize_extension(path.suffix)
        rule = self.match_extension(ext) if ext else None

        destination = None
        if rule is not None:
            folder = render_target_folder(rule.target_folder, ext)
            destination = str(Path(base_dir).expanduser() / folder)
            logger.debug(f"Classified {path.name} as {rule.id} -> {destination}")

        return Classification(
            path=str(path),
            extension=ext,
            rule=rule,
            destination=destination,
        )


def render_target_folder(template: str, extension: str, when: Optional[datetime] = None) -> str:
    """Fill ``{ext}`` and ``{year}`` placeholders of a rule's target folder."""
    when = when or datetime.now()
    return template.format(ext=extension.lstrip('.'), year=f"{when.year:04d}")


def _check_template(rule: Rule) -> None:
    try:
        render_target_folder(rule.target_folder, ".ext")
    except (KeyError, IndexError, ValueError) as e:
        raise RuleCatalogError(
            f"Rule {rule.id!r} has an invalid target folder {rule.target_folder!r}: {e}"
        ) from e


def load_catalog(path: Optional[Union[str, Path]] = None) -> RuleCatalog:
    """
    Load a rule catalog.

    Args:
        path: YAML file with a top-level ``rules`` list. The bundled
            defaults are used when None.

    Returns:
        RuleCatalog
    """
    if path is None:
        return RuleCatalog(DEFAULT_RULES)

    path = Path(path).expanduser()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except OSError as e:
        raise RuleCatalogError(f"Cannot read rules file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise RuleCatalogError(f"Rules file {path} is not valid YAML: {e}") from e

    rules = data.get("rules") if isinstance(data, dict) else None
    if not isinstance(rules, list):
        raise RuleCatalogError(f"Rules file {path} must contain a 'rules' list")

    catalog = RuleCatalog(rules)
    logger.info(f"Loaded {len(catalog)} rules from {path}")
    return catalog
