import json
import os
import sys
from importlib.metadata import version as get_version

import click

from didactic.exception import DidacticException
from didactic.project import Project


version = get_version("didactic")


def echo_json(data):
    click.echo(json.dumps(data, indent=2).rstrip())


class Context:
    def __init__(self):
        self._project_path = os.environ.get("DIDACTIC_PROJECT") or None
        self._project = None
        self._env = None

    def set_project_path(self, value):
        self._project_path = value
        self._project = None

    def get_project(self, silent=False):
        if self._project is not None:
            return self._project
        if self._project_path is not None:
            rv = Project.from_path(self._project_path)
        else:
            rv = Project.discover()
        if rv is None:
            if silent:
                return None
            if self._project_path is None:
                raise click.UsageError(
                    "Could not automatically discover project.  A didactic.ini "
                    "file must exist in the working directory or any of the "
                    "parent directories."
                )
            raise click.UsageError('Could not find project "%s"' % self._project_path)
        self._project = rv
        return rv

    def get_default_output_path(self):
        rv = os.environ.get("DIDACTIC_OUTPUT_PATH")
        if rv is not None:
            return rv
        return self.get_project().get_output_path()

    def get_env(self):
        if self._env is not None:
            return self._env
        env = self.get_project().make_env()
        self._env = env
        return env


pass_context = click.make_pass_decorator(Context, ensure=True)


@click.group()
@click.option(
    "--project",
    type=click.Path(),
    help="The path to the didactic project to work with.",
)
@click.version_option(prog_name="didactic", version=version)
@pass_context
def cli(ctx, project=None):
    """The didactic site builder.

    Compiles a tree of documents, together with any linked directories,
    into a static website with a navigation menu and an RSS feed.
    """
    if project is not None:
        ctx.set_project_path(project)


@cli.command("build")
@click.option(
    "-O", "--output-path", type=click.Path(), default=None, help="The output path."
)
@click.option(
    "-m",
    "--minify/--no-minify",
    default=None,
    help="Controls HTML minification (overrides the project setting).",
)
@click.option(
    "-v",
    "--verbose",
    "verbosity",
    count=True,
    help="Increases the verbosity of the logging.",
)
@pass_context
def build_cmd(ctx, output_path, minify, verbosity):
    """Builds the entire project into the final artifacts.

    The default behavior is to build the project into the default build
    output path which can be discovered with the `project-info` command
    but an alternative output folder can be provided with the
    `--output-path` option.

    If the build fails the exit code will be `1` otherwise `0`.
    """
    from didactic.builder import Builder
    from didactic.reporter import CliReporter

    if output_path is None:
        output_path = ctx.get_default_output_path()

    env = ctx.get_env()

    reporter = CliReporter(env, verbosity=verbosity)
    with reporter:
        builder = Builder(env, output_path, minify=minify)
        failures = builder.build_all()
        return sys.exit(0 if failures == 0 else 1)


@cli.command("clean")
@click.option(
    "-O", "--output-path", type=click.Path(), default=None, help="The output path."
)
@click.option(
    "-v",
    "--verbose",
    "verbosity",
    count=True,
    help="Increases the verbosity of the logging.",
)
@click.confirmation_option(help="Confirms the cleaning.")
@pass_context
def clean_cmd(ctx, output_path, verbosity):
    """Removes the entire build folder."""
    from didactic.builder import Builder
    from didactic.reporter import CliReporter

    if output_path is None:
        output_path = ctx.get_default_output_path()

    env = ctx.get_env()

    reporter = CliReporter(env, verbosity=verbosity)
    with reporter:
        try:
            Builder(env, output_path).clean()
        except DidacticException as e:
            raise click.ClickException(str(e)) from e


@cli.command("project-info", short_help="Shows the info about a project.")
@click.option("as_json", "--json", is_flag=True, help="Prints out the data as json.")
@pass_context
def project_info_cmd(ctx, as_json):
    """Prints out information about the project.  This is particular
    useful for script usage or for discovering information about a
    project that is not immediately obvious (like the paths to the
    default output folder).
    """
    project = ctx.get_project()
    if as_json:
        echo_json(project.to_json())
        return

    click.echo("Name: %s" % project.name)
    click.echo("File: %s" % project.project_file)
    click.echo("Tree: %s" % project.tree)
    click.echo("Output: %s" % project.get_output_path())


main = cli
