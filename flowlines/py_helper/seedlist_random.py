#!/usr/bin/env uv run
"""Generate a random seedlist and store it in config.toml."""

import argparse
import random
import tomllib
from pathlib import Path
from typing import List, Optional

from flowlines.py_helper import variables


def format_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(value, list):
        return "[" + ", ".join(format_value(item) for item in value) + "]"
    if isinstance(value, dict):
        body = ", ".join(f"{k} = {format_value(v)}" for k, v in value.items())
        return "{ " + body + " }"
    raise TypeError(f"Unsupported TOML value: {type(value).__name__}")


def write_toml(data: dict, path: Path) -> None:
    """Write tables and arrays of tables back; comments are not kept."""
    lines: List[str] = []

    def is_table_array(value) -> bool:
        return isinstance(value, list) and bool(value) and all(
            isinstance(item, dict) for item in value
        )

    root_items = [
        (k, v) for k, v in data.items() if not isinstance(v, dict) and not is_table_array(v)
    ]
    for key, value in root_items:
        lines.append(f"{key} = {format_value(value)}")
    if root_items:
        lines.append("")

    for section, table in data.items():
        if isinstance(table, dict):
            lines.append(f"[{section}]")
            for key in sorted(table.keys()):
                lines.append(f"    {key} = {format_value(table[key])}")
            lines.append("")
        elif is_table_array(table):
            for item in table:
                lines.append(f"[[{section}]]")
                for key, value in item.items():
                    lines.append(f"    {key} = {format_value(value)}")
                lines.append("")

    path.write_text("\n".join(lines).rstrip() + "\n", encoding="utf-8")


def write_seedlist(
    config_path: Path,
    count: int,
    min_value: int = 0,
    max_value: int = 9999,
    rng: Optional[random.Random] = None,
) -> List[int]:
    if count <= 0:
        raise ValueError("count must be a positive integer")
    if min_value > max_value:
        raise ValueError("--min must be <= --max")
    if not config_path.exists():
        raise FileNotFoundError(config_path)

    with config_path.open("rb") as f:
        config = tomllib.load(f)

    style = config.get("style")
    if style is None:
        style = {}
    if not isinstance(style, dict):
        raise TypeError("[style] must be a table in config.toml")

    rng = rng or random.Random()
    seeds = [rng.randint(min_value, max_value) for _ in range(count)]
    style["seedlist"] = seeds
    config["style"] = style

    write_toml(config, config_path)
    return seeds


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Create a random seed list.")
    parser.add_argument("count", type=int, help="How many seeds to generate.")
    parser.add_argument(
        "--min",
        dest="min_value",
        type=int,
        default=0,
        help="Minimum random value (inclusive).",
    )
    parser.add_argument(
        "--max",
        dest="max_value",
        type=int,
        default=9999,
        help="Maximum random value (inclusive).",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path.cwd() / variables.CONFIG,
        help="Config file to update.",
    )
    args = parser.parse_args(argv)

    seeds = write_seedlist(args.config, args.count, args.min_value, args.max_value)
    print(f"Wrote seedlist {seeds} to {args.config}")


if __name__ == "__main__":
    main()
