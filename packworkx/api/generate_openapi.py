"""
Write the OpenAPI schema to interfaces/openapi.json.

Usage:
  python -m packworkx.api.generate_openapi [output_path]
"""

import json
import os
import sys

from packworkx.api.main import app


# PUBLIC_INTERFACE
def main(output_path: str = os.path.join("interfaces", "openapi.json")) -> str:
    """Render the schema of every /api/v1 route and return the written path."""
    openapi_schema = app.openapi()
    os.makedirs(os.path.dirname(output_path) or ".", exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(openapi_schema, f, indent=2)
    return output_path


if __name__ == "__main__":
    print(main(*sys.argv[1:2]))
