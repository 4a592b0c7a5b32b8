import logging
import sys

import click

from .pipeline import CallWrapperError, CallWrapperGenerator, load_builtin, load_manifest


@click.command()
@click.option("--output", "-o", default=None, type=click.Path(resolve_path=True), help="Wrapper file, overrides the manifest output")
@click.option("--builtin", "-b", "builtins", multiple=True, type=str, help="Additional builtin, as 'module:function'")
@click.option(
    "--check",
    is_flag=True,
    default=False,
    help="Exit with status 1 when the wrapper is stale, without writing it",
)
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.argument("manifest", type=click.Path(exists=True, dir_okay=False, resolve_path=True))
def moleculer_call_wrapper(output, builtins, check, verbose, manifest):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    try:
        loaded = load_manifest(manifest)
        additional_builtins = [*loaded.builtins, *(load_builtin(b) for b in builtins)]

        generator = CallWrapperGenerator(
            output or loaded.output,
            loaded.services,
            loaded.definition_paths,
            additional_builtins,
            loaded.config,
        )

        if check:
            if not generator.is_up_to_date():
                click.echo(f"{generator.wrapper_path} is out of date", err=True)
                sys.exit(1)
            return

        if generator.write():
            click.echo(f"Wrote {generator.wrapper_path}")
    except CallWrapperError as e:
        raise click.ClickException(str(e)) from e
