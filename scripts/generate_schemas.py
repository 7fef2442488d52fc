"""Generate the JSON schema for the persisted build state file."""

import json
from pathlib import Path
from typing import Optional

from please.kernel.session import BuildSession


def generate_schemas(schemas_dir: Optional[Path] = None) -> Path:
    """Write build_session.schema.json and return its path."""
    schemas_dir = schemas_dir or Path(__file__).parent.parent / "schemas"
    schemas_dir.mkdir(parents=True, exist_ok=True)

    schema_path = schemas_dir / "build_session.schema.json"
    with open(schema_path, 'w', encoding='utf-8') as f:
        json.dump(BuildSession.model_json_schema(), f, indent=2, ensure_ascii=False)
    print(f"Generated: {schema_path}")
    return schema_path


if __name__ == "__main__":
    generate_schemas()
