"""Turn shared override slots into ranked conflicts."""

from mzguard.analysis.popularity import PopularityIndex
from mzguard.schemas.plugins import OverrideIndex, PluginConflict, split_signature

DEFAULT_WARNING_THRESHOLD = 10


class SeverityClassifier:
    """Keeps signatures with two or more writers and grades them by class popularity."""

    def __init__(self, threshold: float = DEFAULT_WARNING_THRESHOLD):
        """
        Initialize classifier.

        Args:
            threshold: Class popularity at or above which a conflict is a warning
        """
        self.threshold = threshold

    def severity_for(self, popularity: float) -> str:
        return "warning" if popularity >= self.threshold else "info"

    def classify(self, index: OverrideIndex, popularity: PopularityIndex) -> list[PluginConflict]:
        """
        Build unsorted conflicts from an override index.

        Args:
            index: Aggregated signature -> plugin names
            popularity: Class popularity lookup (missing classes read as 0)

        Returns:
            One PluginConflict per signature touched by 2+ plugins
        """
        conflicts: list[PluginConflict] = []
        for method, plugins in index.methods.items():
            if len(plugins) < 2:
                continue
            class_name, method_name = split_signature(method)
            conflicts.append(
                PluginConflict(
                    method=method,
                    plugins=list(plugins),
                    severity=self.severity_for(popularity.get(class_name)),
                    class_name=class_name,
                    method_name=method_name,
                )
            )
        return conflicts
