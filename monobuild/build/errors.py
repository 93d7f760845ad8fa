"""
Errors of the install, build and collect steps.

Every error is fatal: it is logged via its `log` method and ends the current command with exit code 1.
"""

import logging
import typing as t


class MonobuildError(Exception):
    """
    Base class of all errors that abort an install, build or collect run.
    """

    hint = None  # type: t.Optional[str]
    """ Optional second line that tells the user how to fix the problem """

    def __init__(self, msg: str, project: t.Optional[str] = None, hint: t.Optional[str] = None):
        super().__init__(msg)
        self.project = project  # type: t.Optional[str]
        """ Name of the affected project """
        if hint is not None:
            self.hint = hint

    def log(self):
        logging.error("❌ {}".format(self))
        if self.hint:
            logging.error("   {}".format(self.hint))


class MissingArgument(MonobuildError):
    """ The project name wasn't passed """
    pass


class UnknownProject(MonobuildError):
    """ The project name isn't one of the configured projects """
    pass


class MissingProjectDirectory(MonobuildError):
    """ The directory of a project doesn't exist """
    pass


class MissingManifest(MonobuildError):
    """ The manifest (package.json) of a project doesn't exist """
    pass


class MissingDependencies(MonobuildError):
    """ The dependency directory of a project doesn't exist before building it """
    hint = "Please run 'monobuild install' first."


class RequiredDependencyMissing(MonobuildError):
    """ A package listed in the required dependencies of a project isn't installed """
    hint = "Please run 'monobuild install' first."

    def __init__(self, msg: str, project: str, dependency: str):
        super().__init__(msg, project)
        self.dependency = dependency  # type: str
        """ Name of the missing package """


class InstallCommandFailed(MonobuildError):
    """ The install command exited with a non zero status """
    pass


class InstallVerificationFailed(MonobuildError):
    """ The install command succeeded but didn't produce the dependency directory """
    pass


class DirectoryChangeFailed(MonobuildError):
    """ The build command couldn't be started in the project directory """
    pass


class BuildCommandFailed(MonobuildError):
    """ The build command exited with a non zero status """

    def __init__(self, msg: str, project: str, cmd: str, return_code: int):
        super().__init__(msg, project)
        self.cmd = cmd  # type: str
        """ Failed command """
        self.return_code = return_code  # type: int
        """ Exit status of the failed command """

    def log(self):
        super().log()
        logging.error("   cmd: {!r}".format(self.cmd))


class MissingBuildOutput(MonobuildError):
    """ The build command succeeded but didn't produce the output directory """
    pass
