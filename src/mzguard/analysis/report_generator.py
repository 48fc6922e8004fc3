"""Report generator for analysis results."""

import json

from mzguard.schemas.plugins import ProjectAnalysis

DEFAULT_TEMPLATE = """# Plugin Analysis Report

**Project:** {project_path}
**Plugins analyzed:** {plugin_count}

## Override Conflicts

{conflicts}

## Dependency Issues

{dependencies}

## Load Order

{load_order}
{notes}"""


class ReportGenerator:
    """Generates formatted reports from analysis results."""

    def __init__(self, template: str = DEFAULT_TEMPLATE):
        """Initialize report generator."""
        self.markdown_template = template

    def _format_conflicts(self, analysis: ProjectAnalysis) -> str:
        report = analysis.conflicts
        if report is None:
            return "Not checked."

        summary = (
            f"**Health:** {report.health}  \n"
            f"**Total overrides:** {report.total_overrides}"
        )
        if not report.conflicts:
            return f"{summary}\n\nNo plugins override the same method."

        lines = []
        for conflict in report.conflicts:
            icon = "🟠" if conflict.severity == "warning" else "🔵"
            lines.append(
                f"- {icon} **{conflict.method}** ({conflict.severity})\n"
                f"  - Plugins (load order): {' → '.join(conflict.plugins)}"
            )
        return f"{summary}\n\n" + "\n".join(lines)

    def _format_dependencies(self, analysis: ProjectAnalysis) -> str:
        report = analysis.dependencies
        if report is None:
            return "Not checked."
        if not report.issues:
            return f"**Health:** {report.health}\n\nNo dependency issues."

        lines = []
        for issue in report.issues:
            icon = "🔴" if issue.severity == "error" else "🟡"
            line = f"- {icon} **{issue.plugin_name}** [{issue.type}] {issue.message}"
            if issue.details and issue.type == "load-order":
                line += f"\n  - {issue.details}"
            lines.append(line)
        return f"**Health:** {report.health}\n\n" + "\n".join(lines)

    def _format_notes(self, analysis: ProjectAnalysis) -> str:
        notes = [f"- ⚠️ {w}" for w in analysis.warnings]
        notes.extend(f"- ✗ {e.file}: {e.error}" for e in analysis.errors)
        if not notes:
            return ""
        return "\n## Scan Notes\n\n" + "\n".join(notes) + "\n"

    def generate_markdown(self, analysis: ProjectAnalysis) -> str:
        """
        Generate markdown report.

        Args:
            analysis: ProjectAnalysis to format

        Returns:
            Formatted markdown string
        """
        load_order = (
            "\n".join(f"{i}. {h.name}" for i, h in enumerate(analysis.plugins, start=1))
            if analysis.plugins
            else "No plugins found."
        )
        return self.markdown_template.format(
            project_path=analysis.project_path,
            plugin_count=len(analysis.plugins),
            conflicts=self._format_conflicts(analysis),
            dependencies=self._format_dependencies(analysis),
            load_order=load_order,
            notes=self._format_notes(analysis),
        )

    def generate_json(self, analysis: ProjectAnalysis) -> str:
        """
        Generate JSON report.

        Conflict fields use their documented camelCase names
        (``className``, ``totalOverrides``, ...).
        """
        return json.dumps(analysis.model_dump(by_alias=True), indent=2, ensure_ascii=False)
