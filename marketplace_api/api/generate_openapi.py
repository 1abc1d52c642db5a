import json
import os
import sys

from marketplace_api.api.main import app


# PUBLIC_INTERFACE
def main(output_dir: str = "interfaces") -> str:
    """Write the OpenAPI schema (all REST routes are under /api/v1) to <output_dir>/openapi.json."""
    openapi_schema = app.openapi()

    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, "openapi.json")

    with open(output_path, "w") as f:
        json.dump(openapi_schema, f, indent=2)
    return output_path


if __name__ == "__main__":
    main(*sys.argv[1:2])
