"""Application configuration using Pydantic v2 Settings.

Centralized configuration that loads from environment variables
and provides type-safe access throughout the application.
"""

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bannergen.strategies.template_engine.models import ImageFit
from bannergen.strategies.template_engine.sizing import DEFAULT_FONT_CSS

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings have sensible defaults and can be overridden via
    environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Document sizing
    scale_factor: float = Field(
        default=3.0,
        gt=0,
        description="Multiplier applied to the template size to get the raster size.",
    )
    default_width: float = Field(
        default=800.0,
        gt=0,
        description="Template width used when neither size nor viewBox is declared.",
    )
    default_height: float = Field(
        default=400.0,
        gt=0,
        description="Template height used when neither size nor viewBox is declared.",
    )
    font_css: str = Field(
        default=DEFAULT_FONT_CSS,
        description="CSS injected into every template (font imports and families).",
    )

    # Binding
    image_fit: ImageFit = Field(
        default=ImageFit.COVER,
        description="Aspect-ratio policy for images: 'contain' (meet) or 'cover' (slice).",
    )
    truncation_margin: float = Field(
        default=10.0,
        ge=0,
        description="Right-hand margin, in template units, kept free by the truncator.",
    )
    ellipsis: str = Field(
        default="…",
        description="Marker appended to truncated text.",
    )
    fill_row_tokens: bool = Field(
        default=False,
        description="Also replace leftover {{column}} tokens anywhere in the template.",
    )
    default_name_column: str = Field(
        default="product_name",
        description="Row column used to name generated files.",
    )
    csv_delimiter: str = Field(
        default=",",
        min_length=1,
        max_length=1,
        description="Delimiter of the tabular input.",
    )

    # Strategy Selection
    measurer_type: str = Field(
        default="browser",
        description="Bounding-box measurer: 'browser' (Chromium getBBox) or 'metrics' (estimate).",
    )
    renderer_type: str = Field(
        default="playwright",
        description="Rendering backend to use: 'playwright'.",
    )

    # Renderer
    chromium_executable_path: str | None = Field(
        default=None,
        description="Optional Chromium binary (e.g. inside a container image).",
    )
    render_timeout_ms: int = Field(
        default=60000,
        gt=0,
        description="Timeout for loading a document into the renderer.",
    )
    readiness_timeout_s: float = Field(
        default=15.0,
        gt=0,
        description="Maximum wait for fonts and images before capture.",
    )

    # Asset upload
    upload_assets: bool = Field(
        default=False,
        description="Upload every generated image to the asset service by default.",
    )
    asset_upload_url: str | None = Field(
        default=None,
        description="Endpoint of the asset upload service.",
    )
    asset_upload_token: str | None = Field(
        default=None,
        description="Optional bearer token for the asset upload service.",
    )
    asset_upload_url_field: str = Field(
        default="secure_url",
        description="Dotted path of the URL in the upload service's JSON response.",
    )

    # File Storage
    upload_dir: Path = Field(
        default=Path("./uploads"),
        description="Directory for uploaded templates and data files.",
    )
    output_dir: Path = Field(
        default=Path("./public/temp"),
        description="Directory holding one folder of generated images per session.",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR.",
    )
    log_dir: Path = Field(
        default=Path("./logs"),
        description="Directory for info.log and error.log.",
    )

    @field_validator("upload_dir", "output_dir")
    @classmethod
    def ensure_dir(cls, v: Path) -> Path:
        """Ensure storage directories exist."""
        v.mkdir(parents=True, exist_ok=True)
        return v.resolve()

    @field_validator("image_fit", mode="before")
    @classmethod
    def normalize_image_fit(cls, v: object) -> object:
        """Accept the SVG keywords 'meet' and 'slice' as aliases."""
        if isinstance(v, str):
            aliases = {"meet": "contain", "slice": "cover"}
            v = v.strip().lower()
            return aliases.get(v, v)
        return v

    @field_validator("measurer_type", "renderer_type")
    @classmethod
    def normalize_strategy(cls, v: str) -> str:
        """Normalize strategy names to lowercase."""
        return v.strip().lower()

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Normalize log level to uppercase."""
        return v.upper()

    def configure_logging(self) -> None:
        """Configure global logging based on settings."""
        import structlog

        level = getattr(logging, self.log_level, logging.INFO)

        structlog.configure(
            processors=[
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.stdlib.PositionalArgumentsFormatter(),
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.stdlib.BoundLogger,
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )

        logging.basicConfig(
            format="%(message)s",
            level=level,
        )

        logger.setLevel(level)


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create the global Settings instance.

    Returns:
        The singleton Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
        _settings.configure_logging()
    return _settings
