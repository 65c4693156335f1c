"""Batch banner generation pipeline.

Sizes the template once, then walks the rows strictly in order: bind the
row to a fresh copy of the template, rasterize it, optionally upload it,
and record the artifact. A row is fully captured before the next row's
binding starts.
"""

import asyncio
import logging
import re
from pathlib import Path

from bannergen.core.config import Settings, get_settings
from bannergen.core.factory import ComponentFactory
from bannergen.interfaces.measurer import BaseMeasurer, MeasurementError
from bannergen.interfaces.reader import Row, TableReadError
from bannergen.interfaces.renderer import BaseRenderer, RenderError, RendererStartupError
from bannergen.interfaces.template import BaseTemplateBinder, TemplateParseError
from bannergen.interfaces.uploader import AssetUploadError, BaseAssetUploader
from bannergen.strategies.template_engine.models import (
    ArtifactStatus,
    GeneratedArtifact,
    GenerationResult,
)
from bannergen.strategies.template_engine.sizing import PreparedTemplate, size_template

logger = logging.getLogger(__name__)

REPORT_FILE_NAME = "report.csv"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9\u0900-\u097F]")


class BannerGenerationError(Exception):
    """Exception raised when a whole batch cannot be generated."""

    pass


def sanitize_name(value: str) -> str:
    """Replace every character outside ASCII alphanumerics and Devanagari with '_'."""
    return _UNSAFE_NAME_CHARS.sub("_", value.strip())


class FileNameAllocator:
    """Hands out unique image file names within one session."""

    def __init__(self, extension: str = ".png") -> None:
        self._extension = extension
        self._used: set[str] = set()

    def allocate(self, raw_name: str, index: int) -> str:
        stem = sanitize_name(raw_name) if raw_name.strip() else ""
        if not stem.strip("_"):
            stem = f"banner_{index}"

        candidate = stem
        counter = 2
        while candidate.lower() in self._used:
            candidate = f"{stem}_{counter}"
            counter += 1
        self._used.add(candidate.lower())
        return f"{candidate}{self._extension}"


class BannerGenerator:
    """Runs banner batches.

    Example:
        ```python
        generator = BannerGenerator(get_settings(), get_factory())
        result = await generator.generate(svg_text, rows, Path("public/temp/abc123"))
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        factory: ComponentFactory | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._factory = factory or ComponentFactory(self._settings)

    async def generate_from_files(
        self,
        template_path: Path,
        table_path: Path,
        output_dir: Path,
        mapping: dict[str, str] | None = None,
        name_column: str | None = None,
        upload: bool | None = None,
    ) -> GenerationResult:
        """Read a template file and a table file, then generate the batch.

        Raises:
            BannerGenerationError: If either input cannot be read, or the batch fails.
        """
        try:
            template_text = await asyncio.to_thread(template_path.read_text, encoding="utf-8-sig")
            rows = await self._factory.get_reader().aload_rows(str(table_path))
        except (FileNotFoundError, UnicodeDecodeError, TableReadError) as e:
            logger.error(f"Cannot read batch input: {e}")
            raise BannerGenerationError(f"Cannot read input: {e}") from e

        return await self.generate(
            template_text,
            rows,
            output_dir,
            mapping=mapping,
            name_column=name_column,
            upload=upload,
        )

    async def generate(
        self,
        template_text: str,
        rows: list[Row],
        output_dir: Path,
        mapping: dict[str, str] | None = None,
        name_column: str | None = None,
        upload: bool | None = None,
    ) -> GenerationResult:
        """Generate one image per row.

        Args:
            template_text: SVG template source.
            rows: Data rows in output order.
            output_dir: Session directory that receives the images.
            mapping: Element id to column name. Empty binds only {{column}} tokens.
            name_column: Column naming each image. Defaults to the configured column.
            upload: Upload each image. Defaults to the configured behavior.

        Returns:
            The GenerationResult with one artifact per row.

        Raises:
            BannerGenerationError: If the template is malformed, the renderer
                cannot start, or a required collaborator is misconfigured.
        """
        mapping = mapping or {}
        name_column = name_column or self._settings.default_name_column
        upload = self._settings.upload_assets if upload is None else upload

        try:
            template = size_template(
                template_text,
                scale_factor=self._settings.scale_factor,
                font_css=self._settings.font_css,
                default_size=(self._settings.default_width, self._settings.default_height),
            )
        except TemplateParseError as e:
            logger.error(f"Template rejected: {e}")
            raise BannerGenerationError(f"Invalid SVG template: {e}") from e

        try:
            uploader = self._factory.get_uploader() if upload else None
            renderer = self._factory.get_renderer()
        except ValueError as e:
            raise BannerGenerationError(str(e)) from e

        output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            f"Generating {len(rows)} banner(s) at {template.width}x{template.height} "
            f"into {output_dir.name} (mapped fields: {len(mapping)}, upload: {upload})"
        )

        artifacts: list[GeneratedArtifact] = []
        measurer: BaseMeasurer | None = None
        try:
            try:
                await renderer.start()
                measurer = self._factory.get_measurer(renderer)
            except RendererStartupError as e:
                raise BannerGenerationError(f"Rendering backend failed to start: {e}") from e
            except ValueError as e:
                raise BannerGenerationError(str(e)) from e

            binder = self._factory.get_binder(measurer)
            names = FileNameAllocator()

            for index, row in enumerate(rows, start=1):
                raw_name = row.get(name_column) or ""
                artifact = GeneratedArtifact(
                    index=index,
                    name=raw_name.strip() or f"Banner {index}",
                    file_name=names.allocate(raw_name, index),
                )
                await self._generate_row(
                    binder, renderer, uploader, template, mapping, row, output_dir, artifact
                )
                artifacts.append(artifact)
        finally:
            if measurer is not None:
                await measurer.aclose()
            await renderer.close()
            if uploader is not None:
                await uploader.aclose()

        result = GenerationResult(artifacts=artifacts, width=template.width, height=template.height)
        if upload:
            report = self._factory.get_packager().write_report(
                artifacts, output_dir / REPORT_FILE_NAME
            )
            result.report_path = str(report)

        logger.info(
            f"Batch finished: {result.generated_count} generated, {result.failed_count} failed"
        )
        return result

    async def _generate_row(
        self,
        binder: BaseTemplateBinder,
        renderer: BaseRenderer,
        uploader: BaseAssetUploader | None,
        template: PreparedTemplate,
        mapping: dict[str, str],
        row: Row,
        output_dir: Path,
        artifact: GeneratedArtifact,
    ) -> None:
        output_path = output_dir / artifact.file_name
        try:
            bound = await binder.bind(template, mapping, row)
            artifact.skipped_fields = list(bound.skipped)
            await renderer.render(bound.markup, template.width, template.height, output_path)
        except (RenderError, MeasurementError, ValueError) as e:
            artifact.status = ArtifactStatus.FAILED
            artifact.error = str(e)
            logger.error(f"Row {artifact.index} ({artifact.name}) failed: {e}", exc_info=True)
            return

        logger.info(f"Row {artifact.index}: generated {artifact.file_name}")

        if uploader is None:
            return
        try:
            artifact.url = await uploader.upload(output_path, output_path.stem)
        except (AssetUploadError, FileNotFoundError) as e:
            artifact.error = f"Upload failed: {e}"
            logger.warning(f"Row {artifact.index}: upload of {artifact.file_name} failed: {e}")
