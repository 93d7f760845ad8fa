import os
import shlex
import typing as t
from typing import NamedTuple

import yaml
from click.testing import CliRunner

from monobuild.scripts.cli import cli, ErrorCode
from monobuild.utils.settings import Settings

INSTALL_CMD = "mkdir -p node_modules/framer-motion && echo 1 > node_modules/framer-motion/index.js"
""" Stand in for the package manager that installs every required dependency """

BUILD_CMD = "mkdir -p dist/assets && echo \"$NODE_ENV\" > dist/env.txt && pwd -P > dist/cwd.txt " \
            "&& echo app > dist/assets/app.js"
""" Stand in for a build command that produces some output """


class Result(NamedTuple):
    out: str
    ret_code: int
    exception: t.Optional[BaseException]


def create_project(root: str, name: str, manifest: bool = True, dependencies: t.List[str] = None,
                   output: t.Dict[str, str] = None) -> str:
    """
    Create a project directory below the passed root.

    :param root: root directory of the monorepo
    :param name: name of the project
    :param manifest: create a package.json?
    :param dependencies: packages that are already "installed" (None: no node_modules directory)
    :param output: {relative path: content} of files in the build output directory
    :return: project directory
    """
    path = os.path.join(root, name)
    os.makedirs(path, exist_ok=True)
    if manifest:
        with open(os.path.join(path, "package.json"), "w") as f:
            f.write('{"name": "%s", "scripts": {"build": "vite build"}}' % name)
    if dependencies is not None:
        os.makedirs(os.path.join(path, "node_modules"), exist_ok=True)
        for dep in dependencies:
            os.makedirs(os.path.join(path, "node_modules", dep), exist_ok=True)
    for file, content in (output or {}).items():
        write_file(os.path.join(path, "dist", file), content)
    return path


def create_monorepo(root: str, **kwargs) -> t.List[str]:
    """ Create the three default projects """
    return [create_project(root, name, **kwargs) for name in ["client", "author", "admin"]]


def write_file(file: str, content: str):
    os.makedirs(os.path.dirname(file), exist_ok=True)
    with open(file, "w") as f:
        f.write(content)


def read_file(file: str) -> str:
    with open(file) as f:
        return f.read()


def list_tree(directory: str) -> t.Dict[str, str]:
    """ {relative path: content} of all files below the passed directory """
    ret = {}
    for root, _, files in os.walk(directory):
        for file in files:
            path = os.path.join(root, file)
            ret[os.path.relpath(path, directory)] = read_file(path)
    return ret


def run_monobuild(args: str, settings: dict = None, expect_success: bool = True) -> Result:
    """
    Run monobuild with the passed arguments

    :param args: arguments for monobuild
    :param settings: settings dictionary, loaded before the call
    :param expect_success: expect a zero return code
    :return: result of the call
    """
    if settings is not None:
        Settings().load_from_dict(settings)
    runner = CliRunner()
    result = runner.invoke(cli, shlex.split(args), catch_exceptions=True)
    ret = Result(result.output.strip(), result.exit_code, result.exception)
    if expect_success:
        assert result.exit_code == ErrorCode.NO_ERROR.value, repr(ret)
    return ret


def dump_settings(file: str, settings: dict):
    with open(file, "w") as f:
        yaml.safe_dump(settings, f)
