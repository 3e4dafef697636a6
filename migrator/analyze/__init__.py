"""Analyze stage: dependency rules, rule runner and graph projection."""

from migrator.analyze.analyzer import DependencyRulesAnalyzer, default_rules
from migrator.analyze.graph import ResourceGraph, SymmetryViolation

__all__ = [
    "DependencyRulesAnalyzer",
    "ResourceGraph",
    "SymmetryViolation",
    "default_rules",
]
