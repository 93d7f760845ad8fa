import logging
import os
import subprocess
import time
import typing as t

import humanfriendly

from monobuild.build.errors import BuildCommandFailed, DirectoryChangeFailed, MissingBuildOutput
from monobuild.build.project import Project
from monobuild.utils.settings import Settings
from monobuild.utils.typecheck import typecheck, Str, Dict
from monobuild.utils.util import progress


class Builder:
    """
    Builds a single project with its own build command.
    """

    def __init__(self, project: Project, build_cmd: str = None, env: t.Dict[str, str] = None):
        """
        Creates a new builder for a project.

        :param project: project to build
        :param build_cmd: command to build the project, default: `build/cmd` setting
        :param env: environment variables that are set for the build command (the others are inherited),
                    default: `build/env` setting
        """
        self.project = project  # type: Project
        """ Built project """
        self.build_cmd = Settings().default(build_cmd, "build/cmd")  # type: str
        """ Command to build the project, executed in the project directory """
        self.env = Settings().default(env, "build/env")  # type: t.Dict[str, str]
        """ Environment variables that override the inherited ones """
        typecheck(self.build_cmd, Str(), "build_cmd")
        typecheck(self.env, Dict(unknown_keys=True, key_type=Str(), value_type=Str()), "env")

    def check(self):
        """
        Check that the project can be built.

        :raises: MissingProjectDirectory, MissingManifest, MissingDependencies, RequiredDependencyMissing
        """
        self.project.check_layout()
        self.project.check_dependencies()

    def build(self) -> str:
        """
        Build the project after checking its layout and dependencies.
        The build command gets the project directory as its working directory, the working directory
        of this process isn't changed.

        :return: build output directory
        :raises: MonobuildError subclass if the build fails
        """
        self.check()
        project = self.project
        progress("\n🔨 Building {}...".format(project.name))
        progress("   Path: {}".format(project.path))
        progress("   Node modules: {}\n".format(project.dependency_dir))
        env = os.environ.copy()
        env.update(self.env)
        start = time.time()
        logging.debug("Run {!r} in {}".format(self.build_cmd, project.path))
        try:
            proc = subprocess.Popen(["/bin/sh", "-c", self.build_cmd], cwd=project.path, env=env)
        except OSError as err:
            raise DirectoryChangeFailed("Failed to change to {} directory: {}".format(project.name, err),
                                        project.name)
        try:
            return_code = proc.wait()
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
        if return_code != 0:
            raise BuildCommandFailed("Failed to build {}: Command {!r} exited with status {}".format(
                project.name, self.build_cmd, return_code), project.name, self.build_cmd, return_code)
        if not os.path.isdir(project.output_dir):
            raise MissingBuildOutput("Build output ({}) not found for {}!".format(
                os.path.basename(project.output_dir), project.name), project.name)
        progress("\n✅ {} built successfully in {}!".format(project.name,
                                                          humanfriendly.format_timespan(time.time() - start)))
        progress("   Output: {}\n".format(project.output_dir))
        return project.output_dir
