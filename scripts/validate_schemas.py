"""Runs jsonschema meta-validation for all request schemas."""

from pathlib import Path
import json
from jsonschema import Draft202012Validator


SCHEMA_DIR = Path(__file__).resolve().parent.parent / "pollcast" / "schemas"


def validate() -> None:
    for schema in sorted(SCHEMA_DIR.glob("*.json")):
        data = json.loads(schema.read_text())
        Draft202012Validator.check_schema(data)
        print(f"ok {schema.name}")


if __name__ == "__main__":
    validate()
