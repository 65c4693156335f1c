"""Banner generation API routes.

Accepts an SVG template and a CSV sheet, renders one banner per row into
a session directory, and serves the session as a zip archive and report.
"""

import json
import logging
import shutil
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from fastapi.responses import FileResponse, JSONResponse, Response

from bannergen.api.deps import get_generator, get_packager, get_session_dir
from bannergen.api.schemas import BannerFile, GenerateErrorResponse, GenerateResponse
from bannergen.core.config import Settings, get_settings
from bannergen.generator import REPORT_FILE_NAME, BannerGenerationError, BannerGenerator
from bannergen.interfaces.packager import BasePackager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["banners"])


def parse_mapping(raw: str | None) -> dict[str, str]:
    """Parse the mapping form field: a JSON object of element id to column name.

    Raises:
        HTTPException: If the field is not such an object.
    """
    if raw is None or not raw.strip():
        return {}
    try:
        mapping = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"mapping is not valid JSON: {e.msg}",
        ) from e
    if not isinstance(mapping, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in mapping.items()
    ):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="mapping must be a JSON object of element id to column name",
        )
    return mapping


async def _save_upload(upload: UploadFile, destination: Path) -> Path:
    content = await upload.read()
    destination.write_bytes(content)
    logger.info(f"Saved upload {upload.filename!r} ({len(content)} bytes)")
    return destination


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={500: {"model": GenerateErrorResponse}},
    status_code=status.HTTP_200_OK,
)
async def generate_banners(
    svg: UploadFile | None = File(default=None, description="SVG template"),
    csv: UploadFile | None = File(default=None, description="CSV sheet, one banner per row"),
    mapping: str | None = Form(default=None, description="JSON object of element id to column"),
    name_column: str | None = Form(default=None, description="Column naming each banner"),
    upload: bool | None = Form(default=None, description="Upload each banner to the asset service"),
    settings: Settings = Depends(get_settings),
    generator: BannerGenerator = Depends(get_generator),
) -> GenerateResponse | JSONResponse:
    """Generate one banner per CSV row.

    Args:
        svg: The SVG template.
        csv: The data sheet.
        mapping: Optional element-id to column binding. Without it, {{column}}
            tokens in the template are filled from each row.
        name_column: Column used to name the images.
        upload: Whether to upload the images.
        settings: Application settings.
        generator: The batch generator.

    Returns:
        GenerateResponse describing the session, or a 500 error body when the
        batch as a whole failed.

    Raises:
        HTTPException: If an input file is missing or the mapping is malformed.
    """
    if svg is None or csv is None:
        logger.warning("Generation request without both files")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing files")

    bindings = parse_mapping(mapping)
    session_id = uuid.uuid4().hex
    upload_dir = settings.upload_dir / session_id
    session_dir = settings.output_dir / session_id

    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        template_path = await _save_upload(svg, upload_dir / "template.svg")
        table_path = await _save_upload(csv, upload_dir / "data.csv")

        logger.info(f"Session {session_id}: generating with {len(bindings)} mapped field(s)")
        result = await generator.generate_from_files(
            template_path,
            table_path,
            session_dir,
            mapping=bindings,
            name_column=name_column,
            upload=upload,
        )

    except BannerGenerationError as e:
        logger.error(f"Session {session_id} failed: {e}", exc_info=True)
        shutil.rmtree(session_dir, ignore_errors=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=GenerateErrorResponse(error=str(e)).model_dump(),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error in generate_banners: {e}", exc_info=True)
        shutil.rmtree(session_dir, ignore_errors=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=GenerateErrorResponse(error=str(e)).model_dump(),
        )
    finally:
        shutil.rmtree(upload_dir, ignore_errors=True)

    files = [
        BannerFile(
            name=artifact.name,
            file_name=artifact.file_name,
            url=f"/temp/{session_id}/{artifact.file_name}",
            status=artifact.status,
            asset_url=artifact.url,
            error=artifact.error,
            skipped_fields=artifact.skipped_fields,
        )
        for artifact in result.artifacts
    ]

    return GenerateResponse(
        session_id=session_id,
        width=result.width,
        height=result.height,
        files=files,
        generated_count=result.generated_count,
        failed_count=result.failed_count,
        zip_url=f"/api/download-zip/{session_id}",
        report_url=f"/api/report/{session_id}" if result.report_path else None,
    )


@router.get("/download-zip/{session_id}")
async def download_zip(
    session_dir: Path = Depends(get_session_dir),
    packager: BasePackager = Depends(get_packager),
) -> Response:
    """Download every banner of a session as one archive."""
    try:
        content = packager.package(session_dir)
    except FileNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session expired or not found",
        ) from e

    return Response(
        content=content,
        media_type=packager.media_type,
        headers={"Content-Disposition": "attachment; filename=banners.zip"},
    )


@router.get("/report/{session_id}")
async def download_report(
    session_dir: Path = Depends(get_session_dir),
) -> FileResponse:
    """Download the per-row report of a session."""
    report_path = session_dir / REPORT_FILE_NAME
    if not report_path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No report for this session",
        )
    return FileResponse(report_path, media_type="text/csv", filename=REPORT_FILE_NAME)
