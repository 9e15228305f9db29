from __future__ import annotations

import argparse
import logging
import time
from pathlib import Path
from typing import Optional

import orjson

from deckjson import config
from deckjson.core.extract import (
    ConversionError,
    ExtractionOptions,
    SchemaVersionError,
    build_default_dispatcher,
    convert_file,
    get_bridge,
)
from deckjson.core.validate.schema_validate import (
    UNIVERSAL_SCHEMA_PATH,
    check_schema_version,
    load_json,
    validate_universal,
)

_TOGGLES = (
    ("include_assets", "--include-assets", "document-level image asset index"),
    ("include_metadata", "--include-metadata", "document properties, chart axes/plot area, table style"),
    ("include_animations", "--include-animations", "slide animation list"),
    ("include_comments", "--include-comments", "slide comments"),
    ("extract_images", "--extract-images", "embed base64 image data (needs assets)"),
    ("include_notes", "--include-notes", "speaker notes text"),
)


def _project_root() -> Path:
    # .../src/deckjson/apps/cli/main.py -> .../src/deckjson -> .../src -> project root
    return Path(__file__).resolve().parents[4]


def _write_json(path: Path, obj: object) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(orjson.dumps(obj, option=orjson.OPT_INDENT_2))


def _options_from_args(args: argparse.Namespace) -> ExtractionOptions:
    overrides = {name: getattr(args, name) for name, _, _ in _TOGGLES}
    return ExtractionOptions.from_mapping(overrides, base=config.default_options())


def cmd_paths(_: argparse.Namespace) -> int:
    print(f"project_root: {_project_root()}")
    print(f"schema.universal: {UNIVERSAL_SCHEMA_PATH}")
    for meta in build_default_dispatcher(get_bridge()).describe():
        print(f"extractor: {meta['name']} {meta['version']} ({meta['complexity']})")
    return 0


def cmd_extract(args: argparse.Namespace) -> int:
    in_path = Path(args.input).resolve()
    out_path = Path(args.out).resolve()

    if not in_path.exists():
        print(f"[NG] input not found: {in_path}")
        return 2
    if in_path.suffix.lower() != ".pptx":
        print(f"[NG] unsupported input type: {in_path.suffix} (use .pptx)")
        return 2

    options = _options_from_args(args)
    timeout = args.timeout if args.timeout is not None else config.TIMEOUT_SECONDS
    deadline = time.monotonic() + timeout if timeout else None

    try:
        output = convert_file(in_path, options, deadline=deadline)
    except ConversionError as e:
        # Do not leave stale output behind.
        try:
            if out_path.exists():
                out_path.unlink()
        except OSError:
            pass
        print(f"[NG] extract failed ({e.code})")
        print(f"      detail: {e}")
        return 2

    _write_json(out_path, output.schema)
    if args.stats:
        _write_json(Path(args.stats).resolve(), {**output.stats.to_dict(), "errors": [e.to_dict() for e in output.errors]})

    s = output.stats
    print(
        f"[OK] extracted: {out_path} "
        f"(slides={s.slide_count} shapes={s.shape_count} images={s.image_count} errors={s.error_count})"
    )
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    instance_path = Path(args.instance).resolve()
    if not instance_path.exists():
        print(f"[NG] instance not found: {instance_path}")
        return 2

    instance = load_json(instance_path)
    try:
        check_schema_version(instance)
    except SchemaVersionError as e:
        print(f"[NG] {e}")
        return 2

    errs = validate_universal(instance)
    if errs:
        print(f"[NG] {instance_path.as_posix()}")
        for m in errs[:30]:
            print(f"  {m}")
        if len(errs) > 30:
            print(f"  ... ({len(errs)} errors)")
        return 2
    print(f"[OK] {instance_path.as_posix()}")
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="deckjson")
    parser.add_argument("--log-level", default=None, help="override DECKJSON_LOG_LEVEL")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_paths = sub.add_parser("paths", help="show important project paths")
    p_paths.set_defaults(func=cmd_paths)

    p_ext = sub.add_parser("extract", help="extract a .pptx into the universal schema")
    p_ext.add_argument("input", help="path to input .pptx")
    p_ext.add_argument("--out", required=True, help="output schema json path")
    p_ext.add_argument("--stats", required=False, help="output processing stats json path")
    p_ext.add_argument("--timeout", type=float, default=None, help="deadline in seconds (checked between slides)")
    for name, flag, help_text in _TOGGLES:
        p_ext.add_argument(flag, dest=name, action=argparse.BooleanOptionalAction, default=None, help=help_text)
    p_ext.set_defaults(func=cmd_extract)

    p_val = sub.add_parser("validate", help="validate a schema json against the universal schema")
    p_val.add_argument("--instance", required=True, help="path to schema json")
    p_val.set_defaults(func=cmd_validate)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper() if args.log_level else config.log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config.log_startup_config()
    raise SystemExit(args.func(args))


if __name__ == "__main__":
    main()
