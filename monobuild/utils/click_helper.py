"""
This module simplifies the creation of click options from settings.

The options only record the explicitly passed values while the command line is parsed,
`apply_cmd_options` sets them after the settings files are loaded.
"""

import typing as t
import warnings

import click
from click.core import ParameterSource

from monobuild.utils.settings import Settings
from monobuild.utils.typecheck import *

PASSED_OPTIONS_KEY = "monobuild.passed_options"
""" Key of the (settings key, value) list of the explicitly passed options in the click context meta dict """


def is_annotatable(type_scheme: Type) -> bool:
    """
    Can the passed type scheme be used as the type of a click option?
    """
    if isinstance(type_scheme, (List, ListOrTuple)):
        return isinstance(type_scheme.elem_type, Str)
    return isinstance(type_scheme, (Str, Bool, ExactEither))


def raw_type(type_scheme: Type) -> t.Union[type, click.ParamType]:
    """
    Click type of the passed (annotatable) type scheme.

    :raises: ValueError if the type scheme isn't annotatable
    """
    if isinstance(type_scheme, (List, ListOrTuple)):
        return raw_type(type_scheme.elem_type)
    if isinstance(type_scheme, ExactEither):
        return click.Choice(type_scheme.exp_values)
    if isinstance(type_scheme, Str):
        return str
    raise ValueError("type scheme {} is not annotatable".format(type_scheme))


class CmdOption:
    """
    Represents a command line option that is backed by a setting.
    The setting is only changed if the option is passed explicitly.
    """

    def __init__(self, option_name: str, settings_key: str, is_eager: bool = False):
        """
        Initializes a option based on a setting.
        Options with a Bool() type scheme are "--ABC/--no-ABC" flags.

        :param option_name: name of the option
        :param settings_key: settings key of the option
        :param is_eager: process the option before the non eager ones
        """
        typecheck(option_name, Str())
        self.option_name = option_name  # type: str
        """ Name of this option """
        self.settings_key = settings_key  # type: str
        """ Settings key of this option """
        self.type_scheme = Settings().get_type_scheme(settings_key)  # type: Type
        """ Type scheme of the option value """
        self.description = (self.type_scheme.description or "").strip().split("\n")[0]  # type: str
        """ Description of this option """
        if not self.description:
            warnings.warn("Option {} is without documentation.".format(option_name))
        self.default = Settings()[settings_key]  # type: t.Any
        """ Default value of this option """
        self.is_flag = isinstance(self.type_scheme, Bool)  # type: bool
        """ Is this option flag like? """
        self.is_eager = is_eager  # type: bool

    def callback(self, ctx: click.Context, param: click.Parameter, value):
        """
        Validates the passed value and records it for `apply_cmd_options` if the option was passed explicitly.
        """
        if ctx.get_parameter_source(param.name) == ParameterSource.DEFAULT:
            return value
        if isinstance(value, tuple):
            value = list(value)
        res = verbose_isinstance(value, self.type_scheme, value_name=self.option_name)
        if not res:
            raise click.BadParameter(str(res), ctx=ctx, param=param)
        ctx.meta.setdefault(PASSED_OPTIONS_KEY, []).append((self.settings_key, value))
        return value

    def __lt__(self, other: 'CmdOption') -> bool:
        """
        Compare by option_name.
        """
        return self.option_name < other.option_name

    def __str__(self) -> str:
        return self.option_name

    def __repr__(self) -> str:
        return "CmdOption({})".format(self.option_name)

    @classmethod
    def from_non_plugin_settings(cls, settings_domain: str, exclude: t.List[str] = None,
                                 name_prefix: str = None) -> 'CmdOptionList':
        """
        Creates a list of CmdOption objects from all sub settings (in the settings domain)
        whose type can be expressed on the command line.

        :param settings_domain: settings domain to look into (or "" for the root domain)
        :param exclude: list of sub keys to exclude
        :param name_prefix: prefix of each option name (usable to avoid ambiguity problems)
        :return: list of CmdOptions
        """
        exclude = exclude or []
        name_prefix = name_prefix or ""
        domain = Settings().type_scheme
        if settings_domain != "":
            domain = Settings().get_type_scheme(settings_domain)
        ret_list = CmdOptionList()
        for sub_key in domain.data:
            if sub_key in exclude or not is_annotatable(domain[sub_key]):
                continue
            ret_list.append(CmdOption(
                option_name=name_prefix + sub_key,
                settings_key=settings_domain + "/" + sub_key if settings_domain != "" else sub_key,
                is_eager=settings_domain == "" and sub_key in ["settings", "config"]
            ))
        return ret_list


class CmdOptionList:
    """
    A simple list for CmdOptions that supports list flattening.
    """

    def __init__(self, *options: t.Union[CmdOption, 'CmdOptionList']):
        self.options = []  # type: t.List[CmdOption]
        """ Options that build up this list """
        for option in options:
            self.append(option)

    def append(self, options: t.Union[CmdOption, 'CmdOptionList']) -> 'CmdOptionList':
        """
        Appends the passed CmdOptionList or CmdOption and flattens the resulting list.

        :return: self
        """
        if isinstance(options, CmdOption):
            self.options.append(options)
        else:
            self.options.extend(options.options)
        return self

    def __iter__(self):
        return self.options.__iter__()

    def __repr__(self) -> str:
        return repr(self.options)


def type_scheme_option(option: CmdOption) -> t.Callable[[t.Callable], t.Callable]:
    """
    Is essentially a wrapper around click.option that works with CmdOption objects.
    """
    option_args = {
        "callback": option.callback,
        "help": option.description or None,
        "is_eager": option.is_eager,
        "default": option.default,
        "show_default": True
    }
    if option.is_flag:
        return click.option("--{name}/--no-{name}".format(name=option.option_name), **option_args)
    option_args["type"] = raw_type(option.type_scheme)
    option_args["multiple"] = isinstance(option.type_scheme, (List, ListOrTuple))
    return click.option("--{}".format(option.option_name), **option_args)


def cmd_option(option: t.Union[CmdOption, CmdOptionList]) -> t.Callable[[t.Callable], t.Callable]:
    """
    Wrapper around click.option that works with CmdOption objects.
    If option is a list of CmdOptions then the decorators are chained.

    :param option: CmdOption or list of CmdOptions
    :return: click.option(...) like decorator
    """
    if isinstance(option, CmdOption):
        return type_scheme_option(option)

    def func(f: t.Callable) -> t.Callable:
        for opt in sorted(option.options, reverse=True):
            f = type_scheme_option(opt)(f)
        return f
    return func


def apply_cmd_options(ctx: click.Context = None):
    """
    Loads the settings files and sets the settings of the explicitly passed options afterwards,
    in the order they were processed (settings files passed via --settings first).

    :param ctx: click context of the current command, default: current context
    :raises: SettingsError if a settings file or an option value is invalid
    """
    ctx = ctx or click.get_current_context()
    Settings().load_files()
    for key, value in ctx.meta.get(PASSED_OPTIONS_KEY, []):
        Settings()[key] = value
