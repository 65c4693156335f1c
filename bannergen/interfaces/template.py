"""Template binding interfaces.

Defines abstract base classes for the template-binding engine.
"""

from abc import ABC, abstractmethod
from typing import Any


class BaseTemplateBinder(ABC):
    """Abstract base class for template binding strategies.

    Binds one data row to the placeholders of a prepared vector template,
    producing a freshly mutated document for every call.
    """

    @abstractmethod
    async def bind(
        self,
        template: Any,
        mapping: dict[str, str],
        row: dict[str, str],
    ) -> Any:
        """Bind a data row to a template.

        Args:
            template: The PreparedTemplate produced by the document sizer.
            mapping: Element id to data column name.
            row: Column name to value for one output image.

        Returns:
            A BoundDocument owning a new element tree.
        """


class TemplateParseError(Exception):
    """Exception raised when a template cannot be parsed as SVG."""

    pass
