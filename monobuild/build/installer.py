import logging
import os
import shutil
import subprocess
import time
import typing as t

import humanfriendly

from monobuild.build.errors import InstallCommandFailed, InstallVerificationFailed
from monobuild.build.project import Project, get_projects
from monobuild.utils.settings import Settings
from monobuild.utils.util import progress


class Installer:
    """
    Installs the dependencies of all projects from scratch, one project after another.
    """

    def __init__(self, projects: t.List[Project] = None, install_cmd: str = None, root: str = None):
        """
        Creates an installer.

        :param projects: projects to install, default: all configured projects
        :param install_cmd: command that installs the dependencies, default: `install/cmd` setting
        :param root: root directory of the monorepo, default: `root` setting
        """
        self.projects = projects if projects is not None else get_projects(root)  # type: t.List[Project]
        """ Projects in installation order """
        self.install_cmd = Settings().default(install_cmd, "install/cmd")  # type: str
        """ Command that is run in each project directory """

    def check(self):
        """
        Check the layout of all projects before any dependency directory is removed.

        :raises: MissingProjectDirectory, MissingManifest
        """
        for project in self.projects:
            project.check_layout()

    def install(self):
        """
        Install the dependencies of all projects, aborting at the first error.
        """
        progress("📦 Installing dependencies for all apps...\n")
        self.check()
        for project in self.projects:
            self.install_project(project)
        progress("✅ All dependencies installed successfully!")

    def install_project(self, project: Project):
        """
        Remove the dependency directory of the passed project, run the install command and
        verify its result.

        :raises: MissingProjectDirectory, MissingManifest, InstallCommandFailed, InstallVerificationFailed,
                 RequiredDependencyMissing
        """
        project.check_layout()
        progress("📦 Installing dependencies for {}...".format(project.name))
        if os.path.lexists(project.dependency_dir):
            logging.info("Remove {}".format(project.dependency_dir))
            if os.path.isdir(project.dependency_dir) and not os.path.islink(project.dependency_dir):
                shutil.rmtree(project.dependency_dir)
            else:
                os.remove(project.dependency_dir)
        start = time.time()
        logging.debug("Run {!r} in {}".format(self.install_cmd, project.path))
        return_code = subprocess.call(["/bin/sh", "-c", self.install_cmd], cwd=project.path)
        if return_code != 0:
            raise InstallCommandFailed("Failed to install dependencies for {} (exit status {})"
                                       .format(project.name, return_code), project.name)
        if not os.path.isdir(project.dependency_dir):
            raise InstallVerificationFailed("{} not found in {} after the installation!".format(
                os.path.basename(project.dependency_dir), project.name), project.name)
        project.check_required_dependencies()
        progress("✅ {} dependencies installed successfully ({})\n".format(
            project.name, humanfriendly.format_timespan(time.time() - start)))
