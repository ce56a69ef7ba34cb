"""Command-line interface for gql-pydefs."""

import asyncio

import click
from pydantic import ValidationError

from . import __version__
from .core.errors import DefinitionsError
from .core.factory import DefinitionsFactory
from .core.options import GenerateOptions
from .logging import configure_logging


def parse_scalar_mapping(_ctx, _param, values) -> dict[str, str]:
    """Parse repeated NAME=TARGET options into a mapping."""
    mapping = {}
    for value in values:
        name, sep, target = value.partition("=")
        if not sep or not name.strip() or not target.strip():
            raise click.BadParameter(f"Expected NAME=TARGET, got {value!r}")
        mapping[name.strip()] = target.strip()
    return mapping


@click.group()
@click.version_option(__version__, prog_name="gql-pydefs")
def main():
    """Generate typed Python declarations from GraphQL schemas."""
    pass


@main.command()
@click.option(
    "--type-paths",
    "-t",
    multiple=True,
    help="Glob pattern for schema files. Repeat for several patterns.",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False),
    help="Output file for the generated definitions.",
)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with generation options; command-line flags win.",
)
@click.option(
    "--output-as",
    type=click.Choice(["class", "interface"]),
    default=None,
    help="Render types as pydantic classes or Protocols (default: class).",
)
@click.option("--watch", "-w", is_flag=True, help="Regenerate on file changes.")
@click.option("--federation", is_flag=True, help="Build the schema as a federation subgraph.")
@click.option("--type-defs", multiple=True, help="Inline SDL appended after the schema files.")
@click.option("--emit-typename", is_flag=True, help="Add a __typename member to object types.")
@click.option("--skip-resolver-args", is_flag=True, help="Render fields with arguments as plain members.")
@click.option("--default-scalar-type", default=None, help="Python type for unmapped custom scalars (default: Any).")
@click.option(
    "--scalar",
    multiple=True,
    callback=parse_scalar_mapping,
    help="Custom scalar mapping NAME=TARGET, e.g. DateTime=datetime.datetime.",
)
@click.option("--enums-as-types", is_flag=True, help="Render enums as Literal types.")
@click.option("--header", default=None, help="Text put verbatim at the top of the output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress progress messages.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
def generate(
    type_paths,
    output,
    config,
    output_as,
    watch,
    federation,
    type_defs,
    emit_typename,
    skip_resolver_args,
    default_scalar_type,
    scalar,
    enums_as_types,
    header,
    quiet,
    verbose,
):
    """Generate Python definitions from GraphQL schema files.

    Examples:

        gql-pydefs generate -t "./schema/**/*.graphql" -o ./definitions.py

        gql-pydefs generate -t "./schema/*.graphql" -o ./definitions.py --output-as interface --watch

        gql-pydefs generate --config ./gql-pydefs.json
    """
    configure_logging(verbose=verbose)

    overrides = {
        "type_paths": list(type_paths) or None,
        "path": output,
        "output_as": output_as,
        "watch": watch or None,
        "federation": federation or None,
        "type_defs": list(type_defs) or None,
        "emit_typename_field": emit_typename or None,
        "skip_resolver_args": skip_resolver_args or None,
        "default_scalar_type": default_scalar_type,
        "custom_scalar_type_mapping": scalar or None,
        "enums_as_types": enums_as_types or None,
        "additional_header": header,
        "debug": False if quiet else None,
    }
    overrides = {k: v for k, v in overrides.items() if v is not None}

    try:
        if config:
            options = GenerateOptions.from_file(config)
            options = options.model_validate({**options.model_dump(), **overrides})
        else:
            if "path" not in overrides:
                raise click.UsageError("Missing option '--output' / '-o'.")
            options = GenerateOptions(**overrides)

        asyncio.run(DefinitionsFactory().generate(options))
    except (DefinitionsError, ValidationError) as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        click.echo("Stopped watching.")


if __name__ == "__main__":
    main()
