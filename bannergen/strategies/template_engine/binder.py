"""Template binder strategy.

Binds one data row to a prepared template: every mapped element is
classified and rewritten as text, image, or fill color, then every text
element that was rewritten is shrunk to fit the canvas.
"""

import logging
from dataclasses import dataclass, field

from lxml import etree

from bannergen.interfaces.measurer import BaseMeasurer
from bannergen.interfaces.template import BaseTemplateBinder
from bannergen.strategies.template_engine.classifier import classify_element
from bannergen.strategies.template_engine.dom import (
    find_by_id,
    local_name,
    owning_text,
    serialize,
    set_style_property,
    style_property,
    xml_safe,
)
from bannergen.strategies.template_engine.models import ImageFit, MutationKind
from bannergen.strategies.template_engine.shapes import (
    find_row_image_target,
    promote_shape,
    set_image_source,
)
from bannergen.strategies.template_engine.sizing import PreparedTemplate
from bannergen.strategies.template_engine.text import fill_row_tokens, mutate_group, mutate_text
from bannergen.strategies.template_engine.truncation import ELLIPSIS, OverflowTruncator

logger = logging.getLogger(__name__)

ROW_IMAGE_COLUMN = "image_url"


@dataclass
class BoundDocument:
    """A template tree mutated for one row.

    Attributes:
        root: The row's own element tree.
        applied: Element id to the mutation that was applied.
        skipped: Element id to the reason it was left untouched.
        truncated: Ids of text elements shortened to fit.
    """

    root: etree._Element
    applied: dict[str, MutationKind] = field(default_factory=dict)
    skipped: dict[str, str] = field(default_factory=dict)
    truncated: list[str] = field(default_factory=list)

    @property
    def markup(self) -> str:
        return serialize(self.root)


class TemplateBinder(BaseTemplateBinder):
    """Binds data rows to mapped template elements.

    Each call re-parses the prepared template, so rows never observe
    each other's mutations.
    """

    def __init__(
        self,
        measurer: BaseMeasurer,
        image_fit: ImageFit = ImageFit.COVER,
        truncation_margin: float = 10.0,
        ellipsis: str = ELLIPSIS,
        fill_row_tokens: bool = False,
    ) -> None:
        """Initialize the binder.

        Args:
            measurer: Bounding-box measurement for promotion and truncation.
            image_fit: Aspect-ratio policy for every image written.
            truncation_margin: Space kept free at the canvas' right edge.
            ellipsis: Marker appended to truncated text.
            fill_row_tokens: Also fill leftover {{column}} tokens from the row.
        """
        self._measurer = measurer
        self._image_fit = image_fit
        self._fill_row_tokens = fill_row_tokens
        self._truncator = OverflowTruncator(measurer, margin=truncation_margin, ellipsis=ellipsis)

        logger.info(
            f"TemplateBinder initialized: image_fit={image_fit.value}, "
            f"margin={truncation_margin}, fill_row_tokens={fill_row_tokens}"
        )

    async def bind(
        self,
        template: PreparedTemplate,
        mapping: dict[str, str],
        row: dict[str, str],
    ) -> BoundDocument:
        """Bind one row to the template.

        Args:
            template: The prepared template for the batch.
            mapping: Element id to column name.
            row: Column name to value.

        Returns:
            The BoundDocument for this row.
        """
        row = {column: xml_safe(value or "") for column, value in row.items()}
        root = template.fresh_root()
        bound = BoundDocument(root=root)
        rewritten: list[etree._Element] = []

        for element_id, column in mapping.items():
            value = row.get(column)
            if not value:
                bound.skipped[element_id] = "empty value"
                logger.debug(f"Field {element_id!r} left blank: no value in column {column!r}")
                continue

            element = find_by_id(root, element_id)
            if element is None:
                bound.skipped[element_id] = "element not found"
                logger.debug(f"Field {element_id!r} skipped: no such element")
                continue

            kind = classify_element(element, value)
            match kind:
                case MutationKind.IMAGE_FILL:
                    set_image_source(element, value, self._image_fit)
                case MutationKind.SHAPE_TO_IMAGE:
                    image = await promote_shape(root, element, value, self._image_fit, self._measurer)
                    if image is None:
                        bound.skipped[element_id] = "bounding box unavailable"
                        continue
                case MutationKind.COLOR_FILL:
                    element.set("fill", value)
                    if style_property(element, "fill") is not None:
                        set_style_property(element, "fill", value)
                case MutationKind.GROUP_TEXT:
                    rewritten.extend(mutate_group(element, column, value))
                case MutationKind.TEXT:
                    mutate_text(element, column, value)
                    owner = owning_text(element)
                    if owner is not None:
                        rewritten.append(owner)

            bound.applied[element_id] = kind

        if self._fill_row_tokens or not mapping:
            if row.get(ROW_IMAGE_COLUMN) and ROW_IMAGE_COLUMN not in mapping.values():
                await self._replace_row_image(root, row[ROW_IMAGE_COLUMN], bound)
            rewritten.extend(fill_row_tokens(root, row))

        seen: set[int] = set()
        for text_element in rewritten:
            if id(text_element) in seen or text_element.getparent() is None:
                continue
            seen.add(id(text_element))
            result = await self._truncator.truncate(root, text_element, template.canvas_width)
            if result.truncated:
                bound.truncated.append(text_element.get("id") or "")

        logger.debug(
            f"Row bound: {len(bound.applied)} applied, {len(bound.skipped)} skipped, "
            f"{len(bound.truncated)} truncated"
        )
        return bound

    async def _replace_row_image(self, root: etree._Element, href: str, bound: BoundDocument) -> None:
        """Put the row's image_url into the template's product image slot."""
        target = find_row_image_target(root)
        if target is None:
            logger.debug("Row has an image_url but the template has no image slot")
            return

        target_id = target.get("id") or ROW_IMAGE_COLUMN
        if local_name(target) == "image":
            set_image_source(target, href, self._image_fit)
            bound.applied[target_id] = MutationKind.IMAGE_FILL
        elif await promote_shape(root, target, href, self._image_fit, self._measurer) is not None:
            bound.applied[target_id] = MutationKind.SHAPE_TO_IMAGE
        else:
            bound.skipped[target_id] = "bounding box unavailable"
