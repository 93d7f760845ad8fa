from monobuild.build.builder import Builder
from monobuild.build.collector import Collector, CopyStats
from monobuild.build.installer import Installer
from monobuild.build.project import get_projects
from monobuild.utils.settings import Settings
from monobuild.utils.util import abspath
import typing as t


class Pipeline:
    """
    Install, build and collect all configured projects in one go.
    """

    def __init__(self, root: t.Optional[str] = None):
        """
        :param root: root directory of the monorepo, default: `root` setting
        """
        self.root = abspath(Settings().default(root, "root"))  # type: str
        self.projects = get_projects(self.root)

    def run(self) -> CopyStats:
        """
        Run the installer, the builder for every project and the collector.
        The first error aborts the pipeline.

        :return: statistics of the collected files
        """
        Installer(self.projects).install()
        for project in self.projects:
            Builder(project).build()
        return Collector(self.projects, root=self.root).collect()
