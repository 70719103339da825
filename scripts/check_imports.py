#!/usr/bin/env python3
"""Check the layering of the correspondence pipeline.

Two rules are enforced over every module under src/:

1. Layer imports. domain/ imports no other layer, application/ imports
   domain/, infrastructure/ imports domain/ and application/, and
   bootstrap/ wires all three. config/ sits outside the layers and may
   be imported anywhere.
2. Adapter libraries. Only infrastructure/ and bootstrap/ talk to the
   outside world, so httpx and prometheus_client may not appear in
   domain/ or application/.

Usage:
    python scripts/check_imports.py [src_directory]

Exit codes:
    0: No violations found
    1: Violations found
"""
import argparse
import ast
import sys
from pathlib import Path
from typing import NamedTuple

# Lower number = inner layer
LAYER_HIERARCHY: dict[str, int] = {
    "domain": 0,
    "application": 1,
    "infrastructure": 2,
    "bootstrap": 3,
}

ALLOWED_IMPORTS: dict[str, set[str]] = {
    "domain": set(),
    "application": {"domain"},
    "infrastructure": {"domain", "application"},
    "bootstrap": {"domain", "application", "infrastructure"},
}

# Importable from any layer
SHARED_PACKAGES: frozenset[str] = frozenset({"config"})

# Third-party libraries reserved for adapters
ADAPTER_LIBRARIES: frozenset[str] = frozenset({"httpx", "prometheus_client"})
ADAPTER_LAYERS: frozenset[str] = frozenset({"infrastructure", "bootstrap"})


class Violation(NamedTuple):
    """One offending import."""

    path: str
    line: int
    message: str


def get_import_module(node: ast.Import | ast.ImportFrom) -> str | None:
    """Return the imported module name, None for relative imports."""
    if isinstance(node, ast.ImportFrom):
        return node.module
    if node.names:
        return node.names[0].name
    return None


def layer_of(py_file: Path, src_dir: Path) -> str | None:
    """Return the layer a file belongs to, None outside the layers."""
    try:
        parts = py_file.relative_to(src_dir).parts
    except ValueError:
        return None
    if len(parts) < 2 or parts[0] not in LAYER_HIERARCHY:
        return None
    return parts[0]


def classify_import(module: str, file_layer: str) -> str | None:
    """Return a violation message for one import, or None if it is allowed."""
    top_level = module.split(".")[0]
    if top_level in ADAPTER_LIBRARIES and file_layer not in ADAPTER_LAYERS:
        return f"{file_layer} layer cannot use adapter library {top_level}"

    if top_level != "src":
        return None
    parts = module.split(".")
    if len(parts) < 2:
        return None
    target = parts[1]
    if target in SHARED_PACKAGES or target not in LAYER_HIERARCHY or target == file_layer:
        return None
    if target not in ALLOWED_IMPORTS[file_layer]:
        return f"{file_layer} layer cannot import from {target}"
    return None


def check_file_imports(py_file: Path, src_dir: Path) -> list[Violation]:
    """Check one module.

    Files that fail to parse are reported on stderr and skipped.
    """
    file_layer = layer_of(py_file, src_dir)
    if file_layer is None:
        return []

    try:
        tree = ast.parse(py_file.read_text(encoding="utf-8"), filename=str(py_file))
    except (SyntaxError, UnicodeDecodeError) as e:
        print(f"Warning: Could not parse {py_file}: {e}", file=sys.stderr)
        return []

    violations: list[Violation] = []
    for node in ast.walk(tree):
        if not isinstance(node, (ast.Import, ast.ImportFrom)):
            continue
        module = get_import_module(node)
        if module is None:
            continue
        message = classify_import(module, file_layer)
        if message is not None:
            violations.append(Violation(str(py_file), node.lineno, message))
    return violations


def check_import_boundaries(src_dir: Path) -> list[Violation]:
    """Check every module below src_dir."""
    if not src_dir.exists():
        print(f"Error: Source directory '{src_dir}' does not exist", file=sys.stderr)
        return []

    violations: list[Violation] = []
    for py_file in sorted(src_dir.rglob("*.py")):
        violations.extend(check_file_imports(py_file, src_dir))
    return violations


def format_violations(violations: list[Violation]) -> str:
    """Render violations one per line with a total."""
    if not violations:
        return ""
    lines = ["Import boundary violations found:", ""]
    lines.extend(f"  {v.path}:{v.line}: {v.message}" for v in sorted(violations))
    lines.extend(["", f"Total: {len(violations)} violation(s)"])
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "src_dir",
        nargs="?",
        type=Path,
        default=Path(__file__).resolve().parent.parent / "src",
        help="source tree to check (default: the project's src/)",
    )
    args = parser.parse_args(argv)

    violations = check_import_boundaries(args.src_dir)
    if violations:
        print(format_violations(violations))
        return 1
    print("No import boundary violations found.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
