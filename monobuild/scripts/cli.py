import logging
import sys
import typing as t
from enum import Enum

import click

from monobuild.build.builder import Builder
from monobuild.build.collector import Collector
from monobuild.build.errors import MonobuildError, MissingArgument
from monobuild.build.installer import Installer
from monobuild.build.pipeline import Pipeline
from monobuild.build.project import get_project, get_project_names
from monobuild.utils.click_helper import cmd_option, CmdOption, CmdOptionList, apply_cmd_options
from monobuild.utils.settings import Settings, SettingsError
import monobuild.scripts.version


class ErrorCode(Enum):
    NO_ERROR = 0
    PROGRAM_ERROR = 1


class MonobuildGroup(click.Group):
    """
    Command group that exits with ErrorCode.PROGRAM_ERROR on usage and settings errors
    (instead of click's exit code 2).
    """

    def main(self, *args, **kwargs):
        kwargs["standalone_mode"] = False
        try:
            return super().main(*args, **kwargs)
        except click.ClickException as err:
            err.show()
            sys.exit(ErrorCode.PROGRAM_ERROR.value)
        except click.Abort:
            click.echo("Aborted!", err=True)
            sys.exit(ErrorCode.PROGRAM_ERROR.value)
        except SettingsError as err:
            logging.error(err)
            sys.exit(ErrorCode.PROGRAM_ERROR.value)


@click.group(cls=MonobuildGroup, epilog="""
monobuild (version {})

Settings are loaded from `config.yaml` in the application directory, from `monobuild.yaml`
in the current directory and from the file passed via --settings, in this order.
""".format(monobuild.scripts.version.version))
def cli():
    pass


command_docs = {
    "install": "Install the dependencies of all projects from scratch",
    "build": "Build a single project",
    "collect": "Copy the build output of all projects into the unified output directory",
    "pipeline": "Install, build and collect all projects",
    "init": "Helper commands to initialize files (like settings)",
    "version": "Print the current version ({})".format(monobuild.scripts.version.version)
}

common_options = CmdOption.from_non_plugin_settings("")

install_options = CmdOption.from_non_plugin_settings("install", name_prefix="install_")

layout_options = CmdOption.from_non_plugin_settings("install", exclude=["cmd"], name_prefix="install_")
""" Options of the install domain that describe the layout of a project """

build_options = CmdOption.from_non_plugin_settings("build", name_prefix="build_")

collect_options = CmdOption.from_non_plugin_settings("collect", name_prefix="collect_")


def run_and_exit(func: t.Callable[[], t.Any]):
    """
    Load the settings and run the passed function, exit with an error code if it fails:
    0 if everything went okay, 1 if a step failed.
    """
    apply_cmd_options()
    try:
        func()
    except MonobuildError as err:
        err.log()
        sys.exit(ErrorCode.PROGRAM_ERROR.value)
    except KeyboardInterrupt:
        logging.error("Aborted")
        sys.exit(ErrorCode.PROGRAM_ERROR.value)


@cli.command(short_help=command_docs["install"])
@cmd_option(CmdOptionList(common_options, install_options))
def install(**kwargs):
    monobuild__install()


def monobuild__install():
    run_and_exit(lambda: Installer().install())


@cli.command(short_help=command_docs["build"])
@click.argument("project", required=False, metavar="PROJECT")
@cmd_option(CmdOptionList(common_options, layout_options, build_options))
@click.pass_context
def build(ctx: click.Context, project: t.Optional[str], **kwargs):
    """
    Build the passed PROJECT, its dependencies have to be installed.
    """
    if not project:
        MissingArgument("App name is required!").log()
        click.echo(ctx.get_usage(), err=True)
        click.echo("Known projects: {}".format(", ".join(get_project_names())), err=True)
        sys.exit(ErrorCode.PROGRAM_ERROR.value)
    monobuild__build(project)


def monobuild__build(project: str):
    run_and_exit(lambda: Builder(get_project(project)).build())


@cli.command(short_help=command_docs["collect"])
@cmd_option(CmdOptionList(common_options, layout_options, build_options, collect_options))
def collect(**kwargs):
    monobuild__collect()


def monobuild__collect():
    run_and_exit(lambda: Collector().collect())


@cli.command(short_help=command_docs["pipeline"])
@cmd_option(CmdOptionList(common_options, install_options, build_options, collect_options))
def pipeline(**kwargs):
    monobuild__pipeline()


def monobuild__pipeline():
    run_and_exit(lambda: Pipeline().run())


@cli.group(short_help=command_docs["init"])
def init():
    pass


@init.command(short_help="Create a new settings file monobuild.yaml (or the file name passed) in the "
                         "current directory")
@click.argument("file", type=click.Path(exists=False), default=Settings.config_file_name)
@cmd_option(common_options)
def settings(file: str, **kwargs):
    monobuild__init__settings(file)


def monobuild__init__settings(file: str):
    apply_cmd_options()
    Settings().store_into_file(file)
    print(file)


@cli.command(short_help=command_docs["version"])
def version():
    print(monobuild.scripts.version.version)


def cli_with_error_catching():
    """
    Process the command line arguments and catch (some) errors.
    """
    try:
        cli()
    except EnvironmentError as err:
        logging.error(err)
        sys.exit(ErrorCode.PROGRAM_ERROR.value)


if __name__ == "__main__":
    # for testing purposes only
    cli_with_error_catching()
