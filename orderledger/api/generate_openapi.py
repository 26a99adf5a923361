"""Write the OpenAPI document to interfaces/openapi.json."""

import json
import os

from orderledger.api.main import app


def main(output_dir: str = "interfaces") -> str:
    openapi_schema = app.openapi()
    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, "openapi.json")
    with open(output_path, "w") as f:
        json.dump(openapi_schema, f, indent=2)
    return output_path


if __name__ == "__main__":
    print(main())
