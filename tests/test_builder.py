"""
Tests for the project builder
"""
import os
import subprocess

import pytest

from monobuild.build.builder import Builder
from monobuild.build.errors import MissingDependencies, MissingProjectDirectory, MissingManifest, \
    RequiredDependencyMissing, BuildCommandFailed, MissingBuildOutput, DirectoryChangeFailed, UnknownProject
from monobuild.build.project import get_project, Project
from tests.utils import create_project, BUILD_CMD, read_file


def test_build(tmp_path):
    path = create_project(str(tmp_path), "client", dependencies=[])
    out = Builder(Project("client", root=str(tmp_path)), build_cmd=BUILD_CMD).build()
    assert out == os.path.join(path, "dist")
    assert read_file(os.path.join(out, "env.txt")).strip() == "production"
    assert read_file(os.path.join(out, "cwd.txt")).strip() == os.path.realpath(path)


def test_build_keeps_working_directory(tmp_path):
    create_project(str(tmp_path), "client", dependencies=[])
    cwd = os.getcwd()
    Builder(Project("client", root=str(tmp_path)), build_cmd=BUILD_CMD).build()
    assert os.getcwd() == cwd


def test_build_env_overrides_and_inherits(tmp_path, monkeypatch):
    monkeypatch.setenv("MONOBUILD_TEST_VAR", "inherited")
    create_project(str(tmp_path), "admin", dependencies=[])
    out = Builder(Project("admin", root=str(tmp_path)),
                  build_cmd="mkdir dist && echo \"$NODE_ENV $MONOBUILD_TEST_VAR\" > dist/env.txt",
                  env={"NODE_ENV": "staging"}).build()
    assert read_file(os.path.join(out, "env.txt")).strip() == "staging inherited"


def test_unknown_project():
    with pytest.raises(UnknownProject) as err:
        get_project("frontend")
    assert "client" in str(err.value)


def test_missing_project_directory(tmp_path):
    with pytest.raises(MissingProjectDirectory):
        Builder(Project("client", root=str(tmp_path)), build_cmd="touch invoked").build()


def test_missing_manifest(tmp_path):
    create_project(str(tmp_path), "client", manifest=False, dependencies=[])
    with pytest.raises(MissingManifest):
        Builder(Project("client", root=str(tmp_path)), build_cmd=BUILD_CMD).build()


def test_missing_dependencies(tmp_path):
    path = create_project(str(tmp_path), "client")
    cwd = os.getcwd()
    with pytest.raises(MissingDependencies) as err:
        Builder(Project("client", root=str(tmp_path)), build_cmd="touch invoked").build()
    assert "node_modules" in str(err.value)
    assert err.value.hint
    assert os.getcwd() == cwd
    assert not os.path.exists(os.path.join(path, "invoked"))


def test_missing_required_dependency(tmp_path):
    path = create_project(str(tmp_path), "author", dependencies=["react"])
    project = get_project("author", root=str(tmp_path))
    with pytest.raises(RequiredDependencyMissing) as err:
        Builder(project, build_cmd="touch invoked").build()
    assert "framer-motion" in str(err.value)
    assert not os.path.exists(os.path.join(path, "invoked"))


def test_author_with_required_dependency(tmp_path):
    create_project(str(tmp_path), "author", dependencies=["framer-motion"])
    Builder(get_project("author", root=str(tmp_path)), build_cmd=BUILD_CMD).build()


def test_failing_build_command(tmp_path):
    create_project(str(tmp_path), "client", dependencies=[])
    with pytest.raises(BuildCommandFailed) as err:
        Builder(Project("client", root=str(tmp_path)), build_cmd="exit 3").build()
    assert err.value.return_code == 3
    assert "exit 3" in str(err.value)


def test_failing_build_command_with_output(tmp_path):
    create_project(str(tmp_path), "client", dependencies=[])
    with pytest.raises(BuildCommandFailed):
        Builder(Project("client", root=str(tmp_path)), build_cmd="mkdir dist; false").build()


def test_build_without_output(tmp_path):
    create_project(str(tmp_path), "client", dependencies=[])
    with pytest.raises(MissingBuildOutput) as err:
        Builder(Project("client", root=str(tmp_path)), build_cmd="true").build()
    assert "dist" in str(err.value)


def test_build_command_not_startable(tmp_path, monkeypatch):
    create_project(str(tmp_path), "client", dependencies=[])

    def popen(*args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", kwargs["cwd"])

    monkeypatch.setattr(subprocess, "Popen", popen)
    with pytest.raises(DirectoryChangeFailed):
        Builder(Project("client", root=str(tmp_path)), build_cmd=BUILD_CMD).build()


def test_custom_output_directory(tmp_path):
    create_project(str(tmp_path), "client", dependencies=[])
    out = Builder(Project("client", root=str(tmp_path), out_dir="build"), build_cmd="mkdir build").build()
    assert out.endswith(os.path.join("client", "build"))


def test_interrupted_build_kills_command(tmp_path, monkeypatch):
    create_project(str(tmp_path), "client", dependencies=[])

    class InterruptedProcess:

        def __init__(self):
            self.killed = False

        def wait(self):
            if not self.killed:
                raise KeyboardInterrupt()
            return -9

        def poll(self):
            return -9 if self.killed else None

        def kill(self):
            self.killed = True

    proc = InterruptedProcess()
    monkeypatch.setattr(subprocess, "Popen", lambda *args, **kwargs: proc)
    with pytest.raises(KeyboardInterrupt):
        Builder(Project("client", root=str(tmp_path)), build_cmd=BUILD_CMD).build()
    assert proc.killed
