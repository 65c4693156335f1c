"""Streamlit frontend for the Banner Generator.

Upload an SVG template and a CSV sheet, bind template elements to columns,
generate the batch and download the results.
"""

import csv
import io
import json
import logging
import os
import re
from typing import Any

import httpx
import streamlit as st
from streamlit.runtime.uploaded_file_manager import UploadedFile

# Configuration
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

# Page config
st.set_page_config(
    page_title="Banner Generator",
    page_icon="🖼️",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ID_ATTRIBUTE = re.compile(r"""\bid\s*=\s*["']([^"']+)["']""")
TOKEN = re.compile(r"\{\{\s*([^{}<>]+?)\s*\}\}")


# =============================================================================
# API Client
# =============================================================================


class APIClient:
    """Small synchronous client for the banner API."""

    def __init__(self, base_url: str):
        """Initialize the API client.

        Args:
            base_url: Base URL of the API.
        """
        self.base_url = base_url.rstrip("/")

    def generate(
        self,
        svg: UploadedFile,
        sheet: UploadedFile,
        mapping: dict[str, str],
        name_column: str | None,
        upload: bool,
    ) -> dict[str, Any]:
        """Request a batch.

        Returns:
            API response dict, empty on failure.
        """
        files = {
            "svg": (svg.name, svg.getvalue(), "image/svg+xml"),
            "csv": (sheet.name, sheet.getvalue(), "text/csv"),
        }
        data = {"mapping": json.dumps(mapping), "upload": str(upload).lower()}
        if name_column:
            data["name_column"] = name_column

        try:
            response = httpx.post(
                f"{self.base_url}/api/generate", files=files, data=data, timeout=600.0
            )
        except httpx.HTTPError as e:
            logger.error(f"Generation request error: {e}")
            st.error(f"Could not reach the API: {e}")
            return {}

        body = response.json() if response.headers.get("content-type", "").startswith("application/json") else {}
        if response.status_code != 200:
            message = body.get("error") or body.get("detail") or response.text
            logger.error(f"Generation failed: {response.status_code} - {message}")
            st.error(f"Generation failed: {message}")
            return {}
        return body

    def fetch(self, path: str) -> bytes | None:
        """Download a file served by the API."""
        try:
            response = httpx.get(f"{self.base_url}{path}", timeout=120.0)
            response.raise_for_status()
            return response.content
        except httpx.HTTPError as e:
            logger.error(f"Download of {path} failed: {e}")
            return None

    def health_check(self) -> bool:
        """Check if the API is healthy.

        Returns:
            True if API is healthy, False otherwise.
        """
        try:
            response = httpx.get(f"{self.base_url}/health", timeout=5.0)
            return response.status_code == 200
        except httpx.HTTPError:
            return False


# =============================================================================
# Helpers
# =============================================================================


def template_ids(svg: UploadedFile) -> list[str]:
    """List element ids declared in a template, in document order."""
    text = svg.getvalue().decode("utf-8", errors="replace")
    return list(dict.fromkeys(ID_ATTRIBUTE.findall(text)))


def template_tokens(svg: UploadedFile) -> list[str]:
    text = svg.getvalue().decode("utf-8", errors="replace")
    return list(dict.fromkeys(TOKEN.findall(text)))


def sheet_columns(sheet: UploadedFile) -> list[str]:
    """Read the header row of a CSV upload."""
    text = sheet.getvalue().decode("utf-8-sig", errors="replace")
    header = next(csv.reader(io.StringIO(text)), [])
    return [name.strip() for name in header if name.strip()]


def suggest_mapping(ids: list[str], columns: list[str]) -> dict[str, str]:
    """Bind every element whose id equals a column name, ignoring case."""
    by_name = {c.lower(): c for c in columns}
    return {element_id: by_name[element_id.lower()] for element_id in ids if element_id.lower() in by_name}


# =============================================================================
# UI Components
# =============================================================================


def render_sidebar(client: APIClient) -> None:
    """Render the sidebar with connection status and instructions.

    Args:
        client: The API client instance.
    """
    with st.sidebar:
        st.title("🖼️ Banner Generator")

        st.divider()

        if client.health_check():
            st.success("✅ API Connected")
        else:
            st.error("❌ API Disconnected")
            st.info(f"API URL: {API_BASE_URL}")

        st.divider()

        st.subheader("Instructions")
        st.markdown("""
        1. **Template**: an SVG whose elements carry ids
        2. **Data**: a CSV with one banner per row
        3. **Mapping**: element id → column name

        Without a mapping, `{{column}}` tokens in the template are filled
        from each row.
        """)

        st.divider()
        st.caption(f"API: `{API_BASE_URL}`")


def render_results(client: APIClient, result: dict[str, Any]) -> None:
    """Render generated banners and download buttons.

    Args:
        client: The API client instance.
        result: The generation response.
    """
    st.subheader("📊 Results")

    col1, col2, col3 = st.columns(3)
    with col1:
        st.metric("Generated", result.get("generated_count", 0))
    with col2:
        failed = result.get("failed_count", 0)
        st.metric("Failed", failed, delta_color="inverse" if failed > 0 else "normal")
    with col3:
        st.metric("Size", f"{result.get('width')}×{result.get('height')}")

    archive = client.fetch(result["zip_url"])
    if archive:
        st.download_button(
            "Download all (zip)",
            data=archive,
            file_name="banners.zip",
            mime="application/zip",
            type="primary",
        )
    if result.get("report_url"):
        report = client.fetch(result["report_url"])
        if report:
            st.download_button("Download report", data=report, file_name="report.csv", mime="text/csv")

    st.divider()

    files = result.get("files", [])
    columns = st.columns(3)
    for position, banner in enumerate(files):
        with columns[position % 3]:
            if banner.get("status") == "failed":
                st.error(f"{banner['name']}: {banner.get('error')}")
                continue
            image = client.fetch(banner["url"])
            if image:
                st.image(image, caption=banner["name"], use_container_width=True)
            if banner.get("skipped_fields"):
                st.caption(f"Skipped: {', '.join(banner['skipped_fields'])}")
            if banner.get("error"):
                st.warning(banner["error"])


def render_generate_section(client: APIClient) -> None:
    """Render the upload, mapping and generation form.

    Args:
        client: The API client instance.
    """
    st.subheader("📤 Inputs")

    col1, col2 = st.columns(2)
    with col1:
        svg = st.file_uploader("SVG template", type=["svg"])
    with col2:
        sheet = st.file_uploader("CSV data", type=["csv"])

    if not svg or not sheet:
        st.info("Upload a template and a data sheet to get started.")
        return

    ids = template_ids(svg)
    columns = sheet_columns(sheet)
    tokens = template_tokens(svg)

    st.write("**Element ids:**", ", ".join(ids) or "none")
    st.write("**Columns:**", ", ".join(columns) or "none")
    if tokens:
        st.write("**Tokens:**", ", ".join(f"{{{{{t}}}}}" for t in tokens))

    st.subheader("🔗 Mapping")
    mapping_text = st.text_area(
        "Element id → column (JSON)",
        value=json.dumps(suggest_mapping(ids, columns), indent=2, ensure_ascii=False),
        height=180,
    )

    col1, col2 = st.columns(2)
    with col1:
        default_index = columns.index("product_name") + 1 if "product_name" in columns else 0
        name_column = st.selectbox("Name banners by", ["(default)", *columns], index=default_index)
    with col2:
        upload = st.checkbox("Upload to asset service", value=False)

    if st.button("Generate", type="primary"):
        try:
            mapping = json.loads(mapping_text or "{}")
        except json.JSONDecodeError as e:
            st.error(f"Mapping is not valid JSON: {e.msg}")
            return

        with st.spinner("Rendering banners..."):
            result = client.generate(
                svg,
                sheet,
                mapping,
                None if name_column == "(default)" else name_column,
                upload,
            )
        if result:
            st.session_state["last_result"] = result

    if st.session_state.get("last_result"):
        st.divider()
        render_results(client, st.session_state["last_result"])


# =============================================================================
# Main App
# =============================================================================


def main() -> None:
    """Main application entry point."""
    client = APIClient(API_BASE_URL)

    render_sidebar(client)

    st.title("Batch Banner Generation")
    render_generate_section(client)


if __name__ == "__main__":
    main()
