import logging
import os
import typing as t

from monobuild.build.errors import MissingProjectDirectory, MissingManifest, MissingDependencies, \
    RequiredDependencyMissing, UnknownProject
from monobuild.utils.settings import Settings
from monobuild.utils.typecheck import typecheck, Str, ListOrTuple
from monobuild.utils.util import abspath, join_strs


class Project:
    """
    A sub application of the monorepo with its own manifest, dependency directory and build output.
    """

    def __init__(self, name: str, root: str = None, required_dependencies: t.List[str] = None,
                 manifest: str = None, dependency_dir: str = None, out_dir: str = None):
        """
        Creates a project, the unset parameters default to the corresponding settings.

        :param name: name of the project, also the name of its directory below the root directory
        :param root: root directory of the monorepo
        :param required_dependencies: packages that have to be installed for this project
        :param manifest: name of the manifest file
        :param dependency_dir: name of the dependency directory
        :param out_dir: name of the build output directory
        """
        typecheck(name, Str(), "name")
        typecheck(required_dependencies or [], ListOrTuple(Str()), "required_dependencies")
        self.name = name  # type: str
        """ Name of the project """
        self.root = abspath(Settings().default(root, "root"))  # type: str
        """ Root directory of the monorepo """
        self.required_dependencies = list(required_dependencies or [])  # type: t.List[str]
        """ Packages that have to be present in the dependency directory """
        self.manifest = Settings().default(manifest, "install/manifest")  # type: str
        self.path = os.path.join(self.root, name)  # type: str
        """ Project directory """
        self.manifest_path = os.path.join(self.path, self.manifest)  # type: str
        self.dependency_dir = os.path.join(self.path,
                                           Settings().default(dependency_dir, "install/dependency_dir"))  # type: str
        self.output_dir = os.path.join(self.path, Settings().default(out_dir, "build/out_dir"))  # type: str
        """ Directory the build command has to produce """

    @classmethod
    def from_config(cls, config: t.Dict[str, t.Any], root: str = None) -> 'Project':
        """
        Creates a project from an entry of the `projects` setting.
        """
        return Project(config["name"], root=root, required_dependencies=config.get("required_dependencies", []))

    def check_layout(self):
        """
        Check that the project directory and its manifest file exist.

        :raises: MissingProjectDirectory, MissingManifest
        """
        if not os.path.isdir(self.path):
            raise MissingProjectDirectory("Directory {} does not exist!".format(self.name), self.name)
        if not os.path.isfile(self.manifest_path):
            raise MissingManifest("{} not found in {}!".format(self.manifest, self.name), self.name)

    def missing_dependencies(self) -> t.List[str]:
        """ Required dependencies that aren't present in the dependency directory """
        return [dep for dep in self.required_dependencies
                if not os.path.exists(os.path.join(self.dependency_dir, dep))]

    def check_required_dependencies(self):
        """
        :raises: RequiredDependencyMissing for the first missing required dependency
        """
        missing = self.missing_dependencies()
        if missing:
            logging.debug("Missing dependencies for {}: {}".format(self.name, join_strs(missing)))
            raise RequiredDependencyMissing("{} not found in {}/{}!".format(
                missing[0], self.name, os.path.basename(self.dependency_dir)), self.name, missing[0])

    def check_dependencies(self):
        """
        Check that the dependencies of this project are installed.

        :raises: MissingDependencies, RequiredDependencyMissing
        """
        if not os.path.isdir(self.dependency_dir):
            raise MissingDependencies("{} not found in {}!".format(os.path.basename(self.dependency_dir), self.name),
                                      self.name)
        self.check_required_dependencies()

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return "Project({!r})".format(self.name)


def get_projects(root: str = None) -> t.List[Project]:
    """
    Projects configured in the `projects` setting, in their configured order.

    :param root: root directory of the monorepo, default: `root` setting
    """
    return [Project.from_config(config, root) for config in Settings()["projects"]]


def get_project_names() -> t.List[str]:
    return [config["name"] for config in Settings()["projects"]]


def get_project(name: str, root: str = None) -> Project:
    """
    Returns the configured project with the passed name.

    :raises: UnknownProject if there is no such project
    """
    for config in Settings()["projects"]:
        if config["name"] == name:
            return Project.from_config(config, root)
    raise UnknownProject("Unknown project {!r}, expected {}".format(name, join_strs(get_project_names(), "or")),
                         name)
