"""
Requirement models — the result of the pre-install gate.

A RequirementSet holds every probe result grouped by category, so a
single check run can report the complete list of deficiencies.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class RequirementCategory(str, Enum):
    """The four kinds of host precondition."""

    SOFTWARE = "software"
    PACKAGES = "packages"
    ACCESS = "access"
    COMMANDS = "commands"


class RequirementResult(BaseModel):
    """One probed requirement."""

    category: RequirementCategory
    name: str
    satisfied: bool
    detail: str = ""


class RequirementSet(BaseModel):
    """All requirement results, grouped by category."""

    results: dict[RequirementCategory, list[RequirementResult]] = Field(
        default_factory=lambda: {c: [] for c in RequirementCategory}
    )

    def add(
        self,
        category: RequirementCategory,
        name: str,
        satisfied: bool,
        detail: str = "",
    ) -> RequirementResult:
        """Record a probe result. Never short-circuits."""
        result = RequirementResult(
            category=category, name=name, satisfied=satisfied, detail=detail,
        )
        self.results.setdefault(category, []).append(result)
        return result

    def category_satisfied(self, category: RequirementCategory) -> bool:
        return all(r.satisfied for r in self.results.get(category, []))

    @property
    def has_all_requirements(self) -> bool:
        return all(self.category_satisfied(c) for c in RequirementCategory)

    def failed_categories(self) -> list[RequirementCategory]:
        return [c for c in RequirementCategory if not self.category_satisfied(c)]

    def unsatisfied(self) -> list[RequirementResult]:
        """Every failing requirement, across all categories."""
        return [
            r
            for category in RequirementCategory
            for r in self.results.get(category, [])
            if not r.satisfied
        ]

    def to_dict(self) -> dict:
        return {
            "passed": self.has_all_requirements,
            "categories": {
                category.value: {
                    "satisfied": self.category_satisfied(category),
                    "items": [
                        r.model_dump(mode="json", exclude={"category"})
                        for r in self.results.get(category, [])
                    ],
                }
                for category in RequirementCategory
            },
        }
