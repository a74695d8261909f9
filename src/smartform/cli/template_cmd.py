"""Template CLI commands: eval, suggest and functions."""

import json
from pathlib import Path
from typing import Any

import click
import yaml

from smartform.config import EngineConfig
from smartform.template import (
    FunctionCategory,
    TemplateEngine,
    TemplateError,
)
from smartform.template.values import stringify, to_plain


def _load_mapping(path: Path | None) -> dict[str, Any]:
    """Load a YAML (or JSON) file that must contain a mapping."""
    if path is None:
        return {}
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.BadParameter(
            f"{path} must contain a mapping of names to values", param_hint="file"
        )
    return data


def _parse_assignments(assignments: tuple[str, ...]) -> dict[str, Any]:
    """Parse --set key=value pairs; values are read as YAML scalars."""
    values: dict[str, Any] = {}
    for assignment in assignments:
        name, sep, raw = assignment.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(
                f"expected key=value, got {assignment!r}", param_hint="--set"
            )
        values[name.strip()] = yaml.safe_load(raw) if raw else ""
    return values


def _build_engine(config: EngineConfig, variables: dict[str, Any]) -> TemplateEngine:
    engine = TemplateEngine(config=config)
    try:
        for name, value in variables.items():
            engine.register_variable(str(name), value)
    except TypeError as e:
        raise click.ClickException(str(e)) from e
    return engine


def _fail(error: TemplateError) -> None:
    click.echo(click.style(f"Error: {error.format_with_context()}", fg="red"), err=True)
    raise SystemExit(1)


@click.command("eval")
@click.argument("template")
@click.option(
    "--vars",
    "vars_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML/JSON file of global variables.",
)
@click.option(
    "--context",
    "context_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML/JSON file of per-call context values.",
)
@click.option(
    "--set",
    "assignments",
    multiple=True,
    metavar="KEY=VALUE",
    help="Context value (repeatable); VALUE is read as YAML.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.pass_obj
def evaluate(
    config: EngineConfig,
    template: str,
    vars_path: Path | None,
    context_path: Path | None,
    assignments: tuple[str, ...],
    as_json: bool,
):
    """Evaluate TEMPLATE and print the result."""
    engine = _build_engine(config, _load_mapping(vars_path))

    context = _load_mapping(context_path)
    context.update(_parse_assignments(assignments))

    try:
        result = engine.evaluate_expression(template, context)
    except TemplateError as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps(to_plain(result)))
    else:
        click.echo(stringify(result))


@click.command()
@click.argument("partial", default="")
@click.option(
    "--vars",
    "vars_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML/JSON file of global variables.",
)
@click.pass_obj
def suggest(config: EngineConfig, partial: str, vars_path: Path | None):
    """Print autocomplete suggestions for PARTIAL as JSON."""
    engine = _build_engine(config, _load_mapping(vars_path))
    suggestions = engine.get_expression_suggestions(partial)
    click.echo(
        json.dumps(
            [s.model_dump(by_alias=True) for s in suggestions],
            indent=2,
        )
    )


@click.command()
@click.option(
    "--category",
    type=click.Choice([c.value for c in FunctionCategory]),
    default=None,
    help="Only list functions in this category.",
)
@click.pass_obj
def functions(config: EngineConfig, category: str | None):
    """List available template functions."""
    engine = TemplateEngine(config=config)
    selected = FunctionCategory(category) if category else None

    definitions = engine.registry.list_functions(selected)
    if not definitions:
        click.echo("No functions registered.")
        return

    current = None
    for func_def in sorted(definitions, key=lambda f: (f.category.value, f.name)):
        if func_def.category != current:
            current = func_def.category
            click.echo(click.style(f"{current.value}:", fg="cyan", bold=True))
        click.echo(f"  {func_def.signature:<40} {func_def.description}")
