# src/auditor/dom/registry.py
import importlib
import pkgutil
import logging
from typing import Dict, List, Callable, Any, Optional, Set

from bs4 import Tag

from .core import ElementDefinition

logger = logging.getLogger(__name__)


class DOMRegistry:
    """
    Maps tag names to the element definitions that claim them.

    Every module in auditor.dom.elements that exposes a DEFINITION is picked up
    once per process. Several definitions may share a tag name (a <div> can be
    a compatibility marker or plain prose); the highest-priority one whose
    matcher accepts the element wins.
    """

    _definitions: Dict[str, List[ElementDefinition]] = {}
    _audit_rules: List[Callable] = []
    _all_codes: Set[str] = set()
    _loaded: bool = False

    @classmethod
    def discover(cls) -> None:
        """Imports the element modules in name order and registers their definitions. Idempotent."""
        if cls._loaded:
            return

        try:
            import auditor.dom.elements as elements_pkg

            for _, name, _ in sorted(pkgutil.iter_modules(elements_pkg.__path__), key=lambda m: m[1]):
                full_name = f"auditor.dom.elements.{name}"
                try:
                    module = importlib.import_module(full_name)
                except ImportError as e:
                    logger.error(f"Error loading module {name}: {e}")
                    continue

                defn = getattr(module, "DEFINITION", None)
                if not isinstance(defn, ElementDefinition):
                    continue

                for tag_name in defn.tag_names:
                    bucket = cls._definitions.setdefault(tag_name, [])
                    bucket.append(defn)
                    bucket.sort(key=lambda d: d.priority, reverse=True)

                for rule in defn.audit_rules:
                    cls._register_rule(defn.model, rule)

                cls._all_codes.update(defn.codes)
                logger.debug(f"Element definition loaded: {', '.join(defn.tag_names)}")

            cls._loaded = True
        except ImportError as e:
            logger.error(f"Could not find elements package: {e}")

    @classmethod
    def _register_rule(cls, model_type: Any, rule_func: Callable) -> None:
        """Rules only ever see nodes of the model they were declared for."""
        def wrapped(node: Any, ctx: Any) -> Any:
            if isinstance(node, model_type):
                return rule_func(node, ctx)
            return []

        wrapped.__name__ = getattr(rule_func, "__name__", "rule")
        cls._audit_rules.append(wrapped)

    @classmethod
    def get_definition(cls, tag: Tag) -> Optional[ElementDefinition]:
        """The highest-priority definition whose matcher accepts `tag`, or None."""
        for defn in cls._definitions.get(tag.name, []):
            if defn.accepts(tag):
                return defn
        return None

    @classmethod
    def get_all_rules(cls) -> List[Callable]:
        return cls._audit_rules

    @classmethod
    def get_all_possible_codes(cls) -> List[str]:
        """Flaw codes declared by the rules, for reporting."""
        return sorted(list(cls._all_codes))
