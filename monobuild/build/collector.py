import logging
import os
import shutil
import typing as t

import humanfriendly

from monobuild.build.project import Project, get_projects
from monobuild.utils.settings import Settings
from monobuild.utils.util import abspath, progress


class CopyStats:
    """
    Number and size of the files copied by `copy_tree`.
    """

    def __init__(self):
        self.files = 0  # type: int
        """ Number of copied files """
        self.bytes = 0  # type: int
        """ Total size of the copied files """

    def __str__(self) -> str:
        return "{} files, {}".format(self.files, humanfriendly.format_size(self.bytes))


def copy_tree(src: str, dest: str, stats: CopyStats = None) -> CopyStats:
    """
    Recursively copy the contents of the source directory into the destination directory.
    Missing destination directories are created, existing files are overwritten and files that exist only
    in the destination are kept.

    :param src: source directory
    :param dest: destination directory
    :param stats: statistics object that is updated
    :return: statistics of the copied files
    :raises: OSError if the source directory doesn't exist or something else goes wrong
    """
    stats = stats or CopyStats()
    os.makedirs(dest, exist_ok=True)
    for entry in os.listdir(src):
        src_path = os.path.join(src, entry)
        dest_path = os.path.join(dest, entry)
        if os.path.isdir(src_path):
            copy_tree(src_path, dest_path, stats)
        else:
            shutil.copyfile(src_path, dest_path)
            stats.files += 1
            stats.bytes += os.path.getsize(dest_path)
    return stats


class Collector:
    """
    Copies the build output of all projects into a unified output directory, each into a sub directory
    named like the project.
    """

    def __init__(self, projects: t.List[Project] = None, out: str = None, clean: bool = None, root: str = None):
        """
        Creates a collector.

        :param projects: projects to collect, default: all configured projects of the root directory
        :param out: unified output directory, relative paths are relative to the root directory,
                    default: `collect/out` setting
        :param clean: remove the sub directory of each project before copying, default: `collect/clean` setting
        :param root: root directory of the monorepo, default: `root` setting
        """
        self.root = abspath(Settings().default(root, "root"))  # type: str
        self.projects = projects if projects is not None else get_projects(self.root)  # type: t.List[Project]
        self.out = abspath(Settings().default(out, "collect/out"), base=self.root)  # type: str
        """ Unified output directory """
        self.clean = Settings().default(clean, "collect/clean")  # type: bool
        """ Remove stale files? """

    def destination(self, project: Project) -> str:
        """ Directory the output of the passed project is copied into """
        return os.path.join(self.out, project.name)

    def collect(self) -> CopyStats:
        """
        Copy the build output of every project, in the configured project order.

        :return: statistics of all copied files
        :raises: OSError
        """
        os.makedirs(self.out, exist_ok=True)
        stats = CopyStats()
        for project in self.projects:
            dest = self.destination(project)
            if self.clean and os.path.isdir(dest):
                logging.info("Remove {}".format(dest))
                shutil.rmtree(dest)
            logging.info("Copy {} to {}".format(project.output_dir, dest))
            copy_tree(project.output_dir, dest, stats)
        progress("✅ All builds copied to {} directory ({})".format(os.path.basename(self.out), stats))
        return stats
