"""Dependency resolution rules, applied in order DP001 to DP006."""

from migrator.analyze.dependency.application import ApplicationDependencyRule
from migrator.analyze.dependency.distribution_list import DistributionListDependencyRule
from migrator.analyze.dependency.orchestration import OrchestrationDependencyRule
from migrator.analyze.dependency.parent_child import ParentChildDependencyRule
from migrator.analyze.dependency.protocols import DependencyRule
from migrator.analyze.dependency.resolution import Resolution, resolve
from migrator.analyze.dependency.schema import SchemaDependencyRule
from migrator.analyze.dependency.transform import TransformDependencyRule

__all__ = [
    "ApplicationDependencyRule",
    "DependencyRule",
    "DistributionListDependencyRule",
    "OrchestrationDependencyRule",
    "ParentChildDependencyRule",
    "Resolution",
    "SchemaDependencyRule",
    "TransformDependencyRule",
    "resolve",
]
