import copy
import logging
import os
import typing as t

import click
import yaml

from monobuild.utils.typecheck import *
from monobuild.utils.util import recursive_exec_for_leafs, Singleton


class SettingsError(ValueError):
    """ Error raised if something with the settings goes wrong """
    pass


DEFAULT_PROJECTS = [
    {"name": "client", "required_dependencies": []},
    {"name": "author", "required_dependencies": ["framer-motion"]},
    {"name": "admin", "required_dependencies": []}
]  # type: t.List[t.Dict[str, t.Any]]
""" Projects of the monorepo in their installation and build order """

PROJECT_SCHEME = Dict({
    "name": Str(lambda x: x not in ["", ".", ".."] and "/" not in x)
            // Description("Name of the project, also the name of its directory below the root directory"),
    "required_dependencies": (ListOrTuple(Str()) | NonExistent())
            // Description("Packages that have to be present in the dependency directory of the project")
})  # type: Dict
""" Type scheme of a single project entry """


class Settings(metaclass=Singleton):
    """
    Manages the settings.
    The settings keys and sub keys are combined by a slash, e.g. "build/cmd".
    """

    config_file_name = "monobuild.yaml"  # type: str
    """ Default name of the configuration files """
    type_scheme = Dict({
        "settings": Str() // Default("") // Description("Additional settings file"),
        "config": Str() // Default("") // Description("Alias for settings"),
        "log_level": ExactEither("debug", "info", "warn", "error", "quiet") // Default("info")
                     // Description("Logging level"),
        "root": Str() // Default(".") // Description("Root directory of the monorepo that contains the projects"),
        "projects": List(PROJECT_SCHEME) // Default(DEFAULT_PROJECTS)
                    // Description("Projects in the order in which they are installed, built and collected"),
        "install": Dict({
            "cmd": Str() // Default("npm install --legacy-peer-deps --no-audit --no-fund --no-update-notifier")
                   // Description("Command that installs the dependencies of a project, "
                                  "executed in the project directory"),
            "manifest": Str() // Default("package.json")
                        // Description("Manifest file that every project directory has to contain"),
            "dependency_dir": Str() // Default("node_modules")
                              // Description("Directory (relative to the project directory) that contains the "
                                             "installed dependencies, removed before each installation")
        }),
        "build": Dict({
            "cmd": Str() // Default("npm run build")
                   // Description("Command that builds a project, executed in the project directory"),
            "out_dir": Str() // Default("dist")
                       // Description("Directory (relative to the project directory) the build command "
                                      "has to produce"),
            "env": Dict(unknown_keys=True, key_type=Str(), value_type=Str()) // Default({"NODE_ENV": "production"})
                   // Description("Environment variables that are set for the build command, "
                                  "all other variables are inherited")
        }),
        "collect": Dict({
            "out": Str() // Default("public")
                   // Description("Unified output directory (relative to the root directory), "
                                  "gets a sub directory per project"),
            "clean": Bool() // Default(False)
                     // Description("Remove the sub directory of each project in the output directory before "
                                    "copying, stale files are kept otherwise")
        })
    })  # type: Dict
    """ Type scheme of the settings """

    def __init__(self):
        """
        Initializes a Settings singleton object with the default settings.

        :raises: SettingsError if the default settings don't match the type scheme
        """
        self.prefs = self.type_scheme.get_default()  # type: t.Dict[str, t.Any]
        """ The current settings """
        res = self._validate_settings_dict(self.prefs, "default settings")
        if not res:
            raise SettingsError(str(res))
        self._setup()

    def load_files(self):
        """ Loads the configuration files from the current and the config directory """
        self.load_from_config_dir()
        self.load_from_current_dir()
        self._setup()

    def _setup(self):
        """
        Apply the log level setting to the root logger.
        """
        mapping = {
            "debug": logging.DEBUG,
            "info": logging.INFO,
            "warn": logging.WARNING,
            "error": logging.ERROR,
            "quiet": logging.CRITICAL
        }
        logging.getLogger().setLevel(mapping[self["log_level"]])

    def reset(self):
        """
        Resets the current settings to the defaults.
        """
        self.prefs = self.type_scheme.get_default()
        self._setup()

    def _validate_settings_dict(self, data: t.Dict[str, t.Any], description: str = None) -> InfoMsg:
        """
        Check whether the passed dictionary matches the settings type scheme.

        :return: True like object if valid, else string like object which is the error message
        """
        return verbose_isinstance(data, self.type_scheme, description or "Settings")

    def load_file(self, file: str):
        """
        Loads the configuration from the configuration YAML file.
        Only the settings present in the file are changed.

        :param file: path to the file
        :raises: SettingsError if the settings file is incorrect or doesn't exist
        """
        tmp = copy.deepcopy(self.prefs)
        try:
            with open(file, "r") as stream:
                data = yaml.safe_load(stream) or {}
            if not isinstance(data, dict):
                raise SettingsError("Settings file {!r} doesn't contain a mapping".format(file))

            def func(key, path, value):
                self._set(path, value)

            recursive_exec_for_leafs(data, func, is_leaf=self._is_leaf_path)
        except (yaml.YAMLError, IOError) as err:
            self.prefs = tmp
            raise SettingsError(str(err))
        except SettingsError:
            self.prefs = tmp
            raise
        res = self._validate_settings_dict(self.prefs, "settings with ones from file '{}'".format(file))
        if not res:
            self.prefs = tmp
            raise SettingsError(str(res))
        logging.debug("Loaded settings file {!r}".format(file))
        self._setup()

    def load_from_dict(self, config_dict: t.Dict[str, t.Any]):
        """
        Load the configuration from the passed dictionary, starting with the default settings.

        :param config_dict: passed configuration dictionary
        """
        tmp = self.prefs
        self.prefs = self.type_scheme.get_default()

        def func(key, path, value):
            self._set(path, value)

        try:
            recursive_exec_for_leafs(config_dict, func, is_leaf=self._is_leaf_path)
        except SettingsError:
            self.prefs = tmp
            raise
        res = self._validate_settings_dict(self.prefs, "settings from config dict")
        if not res:
            self.prefs = tmp
            raise SettingsError(str(res))
        self._setup()

    def load_from_config_dir(self):
        """
        Load the config file from the application directory (e.g. in the users home folder) if it exists.
        """
        conf = os.path.join(click.get_app_dir("monobuild"), "config.yaml")
        if os.path.isfile(conf):
            self.load_file(conf)

    def load_from_current_dir(self):
        """
        Load the configuration from the configuration file in the current working directory if it exists.
        """
        if os.path.isfile(self.config_file_name):
            self.load_file(self.config_file_name)

    def get(self, key: str) -> t.Any:
        """
        Get the setting with the given key.

        :param key: name of the setting
        :return: value of the setting
        :raises: SettingsError if the setting doesn't exist
        """
        path = key.split("/")
        data = self.prefs
        for sub in path:
            if not isinstance(data, dict) or sub not in data:
                raise SettingsError("No such setting {}".format(key))
            data = data[sub]
        return data

    def __getitem__(self, key: str) -> t.Any:
        """
        Alias for self.get(self, key).
        """
        return self.get(key)

    def _type_at(self, path: t.List[str]) -> t.Optional[Type]:
        """ Type scheme at the passed key path or None if there is no such setting """
        tmp_type = self.type_scheme
        for item in path:
            if not isinstance(tmp_type, Dict) or (item not in tmp_type and not tmp_type.unknown_keys):
                return None
            tmp_type = tmp_type[item]
        return tmp_type

    def _is_leaf_path(self, path: t.List[str]) -> bool:
        """ Is the setting with the passed path set as a whole (and not per sub key)? """
        typ = self._type_at(path)
        return not (isinstance(typ, Dict) and not typ.unknown_keys)

    def _set(self, path: t.List[str], value):
        """
        Set the setting at the passed path without validating it.

        :param path: passed key path
        :param value: new value
        :raises: SettingsError if there is no such setting
        """
        if not self.validate_key_path(path):
            raise SettingsError("No such setting {}".format("/".join(path)))
        tmp_pref = self.prefs
        for key in path[0:-1]:
            tmp_pref = tmp_pref.setdefault(key, {})
        tmp_pref[path[-1]] = value
        if path in (["config"], ["settings"]) and value != "":
            self.load_file(value)

    def set(self, key: str, value, validate: bool = True):
        """
        Sets the setting key to the passed new value

        :param key: settings key
        :param value: new value
        :param validate: validate after the setting operation
        :raises: SettingsError if the setting isn't valid
        """
        tmp = copy.deepcopy(self.prefs)
        try:
            self._set(key.split("/"), value)
        except SettingsError:
            self.prefs = tmp
            raise
        if validate:
            res = self._validate_settings_dict(self.prefs, "settings with new setting ({}={!r})".format(key, value))
            if not res:
                self.prefs = tmp
                raise SettingsError(str(res))
        self._setup()

    def __setitem__(self, key: str, value):
        """
        Alias for self.set(key, value).
        """
        self.set(key, value)

    def validate_key_path(self, path: t.List[str]) -> bool:
        """
        Validates a path into the settings tree.

        :param path: list of sub keys
        :return: Is this key path valid?
        """
        return self._type_at(path) is not None

    def has_key(self, key: str) -> bool:
        """ Does the passed key exist? """
        return self.validate_key_path(key.split("/"))

    def get_type_scheme(self, key: str) -> Type:
        """
        Returns the type scheme of the given key.

        :raises: SettingsError if the setting with the given key doesn't exist
        """
        typ = self._type_at(key.split("/"))
        if typ is None:
            raise SettingsError("Setting {} doesn't exist".format(key))
        return typ

    def default(self, value: t.Optional[t.Any], key: str) -> t.Any:
        """
        Returns the passed value if isn't None else the settings value under the passed key.

        :param value: passed value
        :param key: passed settings key
        """
        if value is None:
            return self[key]
        typecheck(value, self.get_type_scheme(key), key)
        return value

    def store_into_file(self, file_name: str):
        """
        Stores the current settings into a yaml file with comments.

        :param file_name: name of the resulting file
        """
        with open(file_name, "w") as f:
            print("# monobuild settings, load them with --settings FILE or name the file {}"
                  .format(self.config_file_name), file=f)
            print(self.type_scheme.get_default_yaml(defaults=self.prefs), file=f)

    def has_log_level(self, level: str) -> bool:
        """
        Does the current log level include messages of the passed level?

        :param level: passed level (in ["error", "warn", "info", "debug"])
        """
        levels = ["quiet", "error", "warn", "info", "debug"]
        return levels.index(level) <= levels.index(self["log_level"])
