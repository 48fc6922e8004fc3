"""Validate declared plugin dependencies against the load order."""

from typing import Iterable

from pydantic import BaseModel, Field

from mzguard.schemas.plugins import DependencyIssue, DependencyReport, PluginHeader

WHITE, GRAY, BLACK = 0, 1, 2


class DependencyGraph(BaseModel):
    """Plugins by name and the names each one depends on (@base + @orderAfter)."""

    plugins: dict[str, PluginHeader] = Field(default_factory=dict)
    edges: dict[str, list[str]] = Field(default_factory=dict)


def _dependencies(header: PluginHeader) -> list[str]:
    return [*header.base, *header.order_after]


def build_dependency_graph(headers: Iterable[PluginHeader]) -> DependencyGraph:
    """Build a directed dependency graph; a later duplicate name replaces an earlier one."""
    graph = DependencyGraph()
    for header in headers:
        graph.plugins[header.name] = header
        graph.edges[header.name] = _dependencies(header)
    return graph


def detect_cycles(graph: DependencyGraph) -> list[DependencyIssue]:
    """Find circular dependencies with a three-colour depth-first search."""
    issues: list[DependencyIssue] = []
    color = {name: WHITE for name in graph.plugins}
    parent: dict[str, str] = {}

    def visit(node: str) -> None:
        color[node] = GRAY
        for dep in graph.edges.get(node, []):
            if dep not in graph.plugins:
                continue  # reported as missing
            if color[dep] == GRAY:
                cycle = [dep, node]
                current = node
                while current in parent and parent[current] != dep:
                    current = parent[current]
                    cycle.append(current)
                cycle.reverse()
                path = " -> ".join(cycle)
                issues.append(
                    DependencyIssue(
                        type="circular",
                        severity="error",
                        plugin_name=node,
                        message=f"Circular dependency detected: {path}",
                        details=path,
                    )
                )
            elif color[dep] == WHITE:
                parent[dep] = node
                visit(dep)
        color[node] = BLACK

    for name in graph.plugins:
        if color[name] == WHITE:
            visit(name)
    return issues


def validate_dependencies(headers: Iterable[PluginHeader]) -> DependencyReport:
    """
    Check duplicates, missing dependencies, cycles and load-order violations.

    Args:
        headers: Plugin headers in load order

    Returns:
        DependencyReport with issues in detection order
    """
    headers = list(headers)
    graph = build_dependency_graph(headers)
    issues: list[DependencyIssue] = []

    position = {header.name: i for i, header in enumerate(headers)}

    # Duplicate names
    filenames_by_name: dict[str, list[str]] = {}
    for header in headers:
        filenames_by_name.setdefault(header.name, []).append(header.filename)
    for name, filenames in filenames_by_name.items():
        if len(filenames) > 1:
            listed = ", ".join(filenames)
            issues.append(
                DependencyIssue(
                    type="duplicate",
                    severity="warning",
                    plugin_name=name,
                    message=f'Duplicate plugin name "{name}" in: {listed}',
                    details=listed,
                )
            )

    # Missing dependencies
    for header in headers:
        for dep in _dependencies(header):
            if dep not in graph.plugins:
                issues.append(
                    DependencyIssue(
                        type="missing",
                        severity="error",
                        plugin_name=header.name,
                        message=f'"{header.name}" requires "{dep}" but it was not found in the project',
                    )
                )

    issues.extend(detect_cycles(graph))

    # Load order
    for header in headers:
        my_pos = position[header.name]
        for dep in _dependencies(header):
            dep_pos = position.get(dep)
            if dep_pos is not None and dep_pos > my_pos:
                issues.append(
                    DependencyIssue(
                        type="load-order",
                        severity="warning",
                        plugin_name=header.name,
                        message=f'"{header.name}" depends on "{dep}" but loads before it',
                        details=(
                            f"{header.name} is at position {my_pos + 1}, "
                            f"{dep} is at position {dep_pos + 1}"
                        ),
                    )
                )

    if any(issue.severity == "error" for issue in issues):
        health = "errors"
    elif issues:
        health = "warnings"
    else:
        health = "healthy"

    names = [header.name for header in headers]
    return DependencyReport(issues=issues, health=health, load_order=names, plugin_names=names)
