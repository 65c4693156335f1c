"""Chromium installation script.

Downloads the Chromium build Playwright drives. Skipped when
CHROMIUM_EXECUTABLE_PATH points at an existing browser.

Usage:
    python -m scripts.install_chromium
"""

import subprocess
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bannergen.core.config import get_settings


def main() -> int:
    """Install Chromium unless a usable executable is configured."""
    settings = get_settings()
    configured = settings.chromium_executable_path
    if configured and Path(configured).exists():
        print(f"Using configured Chromium at {configured}")
        return 0

    print("Installing Chromium for Playwright...")
    completed = subprocess.run(
        [sys.executable, "-m", "playwright", "install", "--with-deps", "chromium"],
        check=False,
    )
    if completed.returncode != 0:
        print("Chromium installation failed")
        return completed.returncode
    print("Chromium installed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
