"""Convert stage support: route walking over the target model."""

from migrator.convert.walker import RouteStep, ScenarioRouteWalker

__all__ = ["RouteStep", "ScenarioRouteWalker"]
