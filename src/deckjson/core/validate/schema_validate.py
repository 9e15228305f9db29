from __future__ import annotations

import argparse
from functools import lru_cache
from pathlib import Path
from typing import Any

import orjson
from jsonschema import Draft202012Validator

from deckjson.core.extract.errors import SchemaVersionError
from deckjson.core.extract.schema import SCHEMA_VERSION

SCHEMAS_DIR = Path(__file__).resolve().parents[1] / "schemas"
UNIVERSAL_SCHEMA_PATH = SCHEMAS_DIR / "universal.schema.json"

SUPPORTED_MAJOR = SCHEMA_VERSION.split(".", 1)[0]


def load_json(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


@lru_cache(maxsize=None)
def _universal_validator() -> Draft202012Validator:
    return Draft202012Validator(load_json(UNIVERSAL_SCHEMA_PATH))


def format_errors(validator: Draft202012Validator, instance: Any) -> list[str]:
    """Human-readable errors, one ``- <jsonpath>: <message>`` line each."""
    errors = sorted(validator.iter_errors(instance), key=lambda e: [str(p) for p in e.path])
    result: list[str] = []
    for e in errors:
        path = "$"
        for p in e.path:
            path += f"[{p!r}]" if isinstance(p, str) else f"[{p}]"
        result.append(f"- {path}: {e.message}")
    return result


def check_schema_version(instance: Any) -> str:
    """Return the instance version, refusing unknown major versions."""
    if not isinstance(instance, dict):
        raise SchemaVersionError("universal schema must be a JSON object")
    version = instance.get("version")
    if not isinstance(version, str) or not version:
        raise SchemaVersionError("universal schema has no version")
    major = version.split(".", 1)[0]
    if major != SUPPORTED_MAJOR:
        raise SchemaVersionError(
            f"unsupported universal schema version {version!r} (supported: {SUPPORTED_MAJOR}.x)"
        )
    return version


def validate_universal(instance: Any) -> list[str]:
    """Validate an in-memory universal schema. Empty list means valid."""
    try:
        check_schema_version(instance)
    except SchemaVersionError as e:
        return [f"- $['version']: {e}"]
    return format_errors(_universal_validator(), instance)


def validate_json_against_schema(schema_path: Path, instance_path: Path) -> list[str]:
    if not schema_path.exists():
        return [f"[ERR] schema not found: {schema_path}"]
    if not instance_path.exists():
        return [f"[ERR] instance not found: {instance_path}"]
    return format_errors(Draft202012Validator(load_json(schema_path)), load_json(instance_path))


def main() -> int:
    ap = argparse.ArgumentParser(prog="schema_validate")
    ap.add_argument("--schema", default=str(UNIVERSAL_SCHEMA_PATH), help="path to *.schema.json")
    ap.add_argument("--instance", required=True, help="path to json to validate")
    args = ap.parse_args()

    schema_path = Path(args.schema)
    instance_path = Path(args.instance)

    errors = validate_json_against_schema(schema_path, instance_path)
    if not errors:
        print(f"[OK] {instance_path} conforms to {schema_path}")
        return 0
    if errors[0].startswith("[ERR]"):
        print(errors[0])
        return 2
    print(f"[NG] {instance_path} does NOT conform to {schema_path}")
    for err in errors:
        print(f"  {err}")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
