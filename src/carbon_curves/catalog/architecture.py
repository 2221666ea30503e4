"""Canonicalisation of vendor-reported CPU architecture labels."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Final

from carbon_curves.catalog.models import AVERAGE_ARCHITECTURE, ArchitectureUsage
from carbon_curves.errors import UnsupportedValueError, build_error_message

__all__ = ["ArchitectureResolver", "RewriteRule", "AWS_ARCHITECTURE_RULES"]

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RewriteRule:
    """Rewrite applied when ``marker`` occurs in a raw label."""

    marker: str
    rewrite: Callable[[str], str]

    def matches(self, label: str) -> bool:
        return self.marker in label


def _strip_vendor_prefix(label: str) -> str:
    return label[4:]


def _graviton_generation(label: str) -> str:
    return "Graviton2" if "2" in label else "Graviton"


# First match wins; vendor prefix stripping must stay ahead of the rest.
AWS_ARCHITECTURE_RULES: Final[tuple[RewriteRule, ...]] = (
    RewriteRule("AMD ", _strip_vendor_prefix),
    RewriteRule("Skylake", lambda _label: "Sky Lake"),
    RewriteRule("Graviton", _graviton_generation),
    RewriteRule("Unknown", lambda _label: AVERAGE_ARCHITECTURE),
)


class ArchitectureResolver:
    """Map raw architecture labels onto buckets of a vendor usage table."""

    def __init__(
        self,
        usage: Mapping[str, ArchitectureUsage],
        rules: tuple[RewriteRule, ...] = AWS_ARCHITECTURE_RULES,
    ) -> None:
        self._usage = usage
        self._rules = rules

    def canonical_label(self, raw_label: str) -> str:
        """Apply the first matching rewrite rule to ``raw_label``."""

        for rule in self._rules:
            if rule.matches(raw_label):
                return rule.rewrite(raw_label)
        return raw_label

    def resolve(self, raw_label: str) -> str:
        """Return the canonical architecture for ``raw_label``.

        Raises:
            UnsupportedValueError: If the canonical label has no entry in the
                usage table.
        """

        architecture = self.canonical_label(raw_label)
        if architecture not in self._usage:
            raise UnsupportedValueError(
                build_error_message(
                    "ArchitectureResolver",
                    f"Architecture '{architecture}' is not supported",
                )
            )
        if architecture != raw_label:
            LOGGER.debug(
                "Architecture label rewritten",
                extra={"raw_label": raw_label, "architecture": architecture},
            )
        return architecture

    def usage_for(self, raw_label: str) -> ArchitectureUsage:
        """Resolve ``raw_label`` and return its usage entry."""

        return self._usage[self.resolve(raw_label)]
