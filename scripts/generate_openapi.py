"""Utility script to export the reporting API's OpenAPI specification."""

from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from chargeview.core.config import get_settings
from chargeview.main import create_application


def main(destination: Path = Path("docs/openapi.json")) -> None:
    settings = get_settings().model_copy(update={"enable_tracing": False, "enable_metrics": False})
    app = create_application(settings)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(json.dumps(app.openapi(), indent=2), encoding="utf-8")
    print(f"OpenAPI specification written to {destination}")


if __name__ == "__main__":
    main()
