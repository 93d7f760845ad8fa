"""
Type checking for the nested structures that come from the user (e.g. YAML settings files).

Type instances work with the standard isinstance function::

    isinstance("abc", Str() | Int())

Types can be annotated with a description and a default value via the "//" operator::

    Str() // Default("npm run build") // Description("Command that builds a project")

A Dict of annotated types therefore describes a whole configuration tree including its defaults,
which is how the settings of monobuild are declared.
"""

import copy
import typing as t

import yaml

__all__ = [
    "Type",
    "Any",
    "T",
    "ExactEither",
    "Either",
    "NonExistent",
    "Str",
    "Int",
    "Bool",
    "List",
    "ListOrTuple",
    "Dict",

    "Info",
    "InfoMsg",
    "Description",
    "Default",
    "ConstraintError",

    "verbose_isinstance",
    "typecheck",
]


class ConstraintError(ValueError):
    """
    Error that is thrown if a type scheme is constructed with invalid arguments.
    """
    pass


class InfoMsg:
    """
    Result of a type check: true like on success, false like with an error message otherwise.
    """

    def __init__(self, msg_or_bool: t.Union[str, bool]):
        self.success = msg_or_bool is True  # type: bool
        """ Was the type check successful? """
        self.msg = msg_or_bool if isinstance(msg_or_bool, str) else str(self.success)  # type: str
        """ Error message or "True" """

    def __str__(self) -> str:
        return self.msg

    def __bool__(self) -> bool:
        return self.success


class Info:
    """
    Information object that is used to produce meaningful type check error messages.
    It knows the name of the checked value and the path into it that is currently examined.
    """

    def __init__(self, value_name: str = None, value=None, _app_str: str = ""):
        """
        Creates a new info object.

        :param value_name: name of the value that is type checked
        :param value: value that is type checked
        """
        self.value_name = value_name  # type: t.Optional[str]
        """ Name of the checked value """
        self.value = value
        """ Checked value """
        self._app_str = _app_str

    def add_to_name(self, app_str: str) -> 'Info':
        """
        Creates a new info object that additionally points to a part of the value, e.g. "['cmd']".
        """
        return Info(self.value_name, self.value, self._app_str + app_str)

    def _str(self) -> str:
        if self.value_name is None:
            return "value {!r}{}".format(self.value, self._app_str)
        return "{}{} of value {!r}".format(self.value_name, self._app_str, self.value)

    def errormsg(self, constraint: 'Type', msg: str = None) -> InfoMsg:
        """ Error message stating that the examined part doesn't have the expected type """
        return InfoMsg("{} hasn't the expected type {}{}".format(self._str(), constraint,
                                                                  ": " + msg if msg else ""))

    def errormsg_cond(self, cond: bool, constraint: 'Type', msg: str = None) -> InfoMsg:
        if cond:
            return InfoMsg(True)
        return self.errormsg(constraint, msg)

    def errormsg_non_existent(self, constraint: 'Type') -> InfoMsg:
        return InfoMsg("{} is non existent, expected value of type {}".format(self._str(), constraint))

    def errormsg_unexpected_key(self, constraint: 'Type', key) -> InfoMsg:
        return InfoMsg("{} has the unexpected key {!r}, expected value of type {}".format(self._str(), key,
                                                                                          constraint))

    def wrap(self, result: bool) -> InfoMsg:
        return InfoMsg(result)


class Description:
    """
    A description of a Type, that annotates it::

        Str() // Description("Command that builds a project")
    """

    def __init__(self, description: str):
        self.description = description
        """ Description string """

    def __str__(self) -> str:
        return self.description


class Default:
    """
    A default value annotation for a Type::

        Str() // Default("dist")
    """

    def __init__(self, default):
        self.default = default
        """ Default value of the annotated type """


class Type:
    """
    Base class of all type scheme types.
    """

    def __init__(self):
        self.description = None  # type: t.Optional[str]
        """ Description of this type instance """
        self.default = None  # type: t.Optional[Default]
        """ Default value of this type instance """

    def __instancecheck__(self, value, info: Info = None) -> InfoMsg:
        """
        Checks whether or not the passed value has the type specified by this instance.

        :param value: passed value
        :param info: info object for creating error messages
        """
        if info is None:
            info = Info(value=value)
        return self._instancecheck_impl(value, info)

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        return info.wrap(False)

    def __str__(self) -> str:
        return "Type()"

    def _validate_types(self, *types: 'Type'):
        for typ in types:
            if not isinstance(typ, Type):
                raise ConstraintError("{} is not an instance of a Type subclass".format(typ))

    def __or__(self, other: 'Type') -> 'Type':
        """ Alias for Either(self, other) """
        return Either(self, other)

    def __floordiv__(self, other: t.Union[str, Description, Default]) -> 'Type':
        """
        Annotates this type with a description (str or Description) or a default value.
        Default values are type checked.
        """
        if isinstance(other, (str, Description)):
            self.description = str(other)
            return self
        if isinstance(other, Default):
            typecheck(other.default, self)
            self.default = other
            return self
        raise ConstraintError("Can't annotate {} with {!r}".format(self, other))

    def __eq__(self, other) -> bool:
        return type(other) == type(self) and self._eq_impl(other)

    def __hash__(self):
        return id(self)

    def _eq_impl(self, other: 'Type') -> bool:
        return True

    def get_default(self) -> t.Any:
        """
        Returns a copy of the default value of this type.

        :raises: ValueError if the default value isn't set
        """
        if self.default is None:
            raise ValueError("{} has no default value.".format(self))
        return copy.deepcopy(self.default.default)

    def has_default(self) -> bool:
        return self.default is not None

    def get_default_yaml(self, indents: int = 0, indentation: int = 4, str_list: bool = False,
                         defaults=None) -> t.Union[str, t.List[str]]:
        """
        Produce a YAML string that contains the default value of this type.

        :param indents: number of indents in front of each produced line
        :param indentation: indentation width in number of white spaces
        :param str_list: return a list of lines instead of a combined string?
        :param defaults: value that is used instead of the default value of this instance
        """
        if defaults is None:
            defaults = self.get_default()
        y_str = yaml.safe_dump(defaults, default_flow_style=None).strip()
        if y_str.endswith("\n..."):
            y_str = y_str[0:-4]
        i_str = " " * indents * indentation
        strs = [i_str + line for line in y_str.split("\n")]
        return strs if str_list else "\n".join(strs)


class Any(Type):
    """
    Matches every value.
    """

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        return info.wrap(True)

    def __str__(self) -> str:
        return "Any()"


class T(Type):
    """
    Wrapper around a native python type.
    """

    def __init__(self, native_type: type):
        super().__init__()
        self.native_type = native_type  # type: type
        """ Wrapped native type """

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        return info.errormsg_cond(isinstance(value, self.native_type), self)

    def __str__(self) -> str:
        return "T({})".format(self.native_type.__name__)

    def _eq_impl(self, other: 'T') -> bool:
        return self.native_type == other.native_type


class ExactEither(Type):
    """
    Checks that the value is one of the expected values, e.g. one of several log levels.
    """

    def __init__(self, *exp_values):
        super().__init__()
        self.exp_values = list(exp_values)  # type: t.List[t.Any]
        """ Expected values """

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        cond = any(isinstance(value, type(exp)) and value == exp for exp in self.exp_values)
        return info.errormsg_cond(cond, self)

    def __str__(self) -> str:
        return "ExactEither({})".format(", ".join(repr(val) for val in self.exp_values))

    def _eq_impl(self, other: 'ExactEither') -> bool:
        return self.exp_values == other.exp_values


class Either(Type):
    """
    Checks for the value to be of one of several types.
    """

    def __init__(self, *types: Type):
        super().__init__()
        self._validate_types(*types)
        self.types = list(types)  # type: t.List[Type]
        """ Possible types """

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        for typ in self.types:
            if typ.__instancecheck__(value, info):
                return info.wrap(True)
        return info.errormsg(self)

    def __or__(self, other: Type) -> 'Either':
        return Either(*(self.types + [other]))

    def __str__(self) -> str:
        return "Either({})".format("|".join(str(typ) for typ in self.types))

    def _eq_impl(self, other: 'Either') -> bool:
        return self.types == other.types


class _NonExistentVal:
    """
    Placeholder for a missing dictionary value.
    """

    def __repr__(self) -> str:
        return "<non existent>"


_non_existent_val = _NonExistentVal()


class NonExistent(Type):
    """
    Allows a key of a dictionary to be missing if its associated type contains this type, e.g.
    ``Str() | NonExistent()``.
    """

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        return info.errormsg_cond(value is _non_existent_val, self)

    def __str__(self) -> str:
        return "non existent"


class Str(Type):
    """
    Checks for the value to be a string that optionally meets a constraint.
    """

    def __init__(self, constraint: t.Callable[[str], bool] = None):
        super().__init__()
        self.constraint = constraint
        """ Function that returns True if the user defined constraint is satisfied """

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        if not isinstance(value, str):
            return info.errormsg(self)
        return info.errormsg_cond(self.constraint is None or self.constraint(value), self)

    def __str__(self) -> str:
        return "Str()" if self.constraint is None else "Str({!r})".format(self.constraint)

    def _eq_impl(self, other: 'Str') -> bool:
        return self.constraint == other.constraint


class Int(Type):
    """
    Checks for the value to be an integer (not a bool) that optionally meets a constraint.
    """

    def __init__(self, constraint: t.Callable[[int], bool] = None):
        super().__init__()
        self.constraint = constraint

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        if not isinstance(value, int) or isinstance(value, bool):
            return info.errormsg(self)
        return info.errormsg_cond(self.constraint is None or self.constraint(value), self)

    def __str__(self) -> str:
        return "Int()" if self.constraint is None else "Int({!r})".format(self.constraint)

    def _eq_impl(self, other: 'Int') -> bool:
        return self.constraint == other.constraint


class Bool(Type):
    """
    Checks for the value to be True or False.
    """

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        return info.errormsg_cond(value is True or value is False, self)

    def __str__(self) -> str:
        return "Bool()"


class List(Type):
    """
    Checks for the value to be a list with elements of a given type.
    """

    def __init__(self, elem_type: Type = Any()):
        super().__init__()
        self._validate_types(elem_type)
        self.elem_type = elem_type  # type: Type
        """ Expected type of the list elements """

    def _native_types(self) -> tuple:
        return list,

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        if not isinstance(value, self._native_types()):
            return info.errormsg(self)
        for (i, elem) in enumerate(value):
            res = self.elem_type.__instancecheck__(elem, info.add_to_name("[{}]".format(i)))
            if not res:
                return res
        return info.wrap(True)

    def __str__(self) -> str:
        return "{}({})".format(type(self).__name__, self.elem_type)

    def _eq_impl(self, other: 'List') -> bool:
        return self.elem_type == other.elem_type


class ListOrTuple(List):
    """
    Checks for the value to be a list or tuple with elements of a given type.
    """

    def _native_types(self) -> tuple:
        return list, tuple


class Dict(Type):
    """
    Checks for the value to be a dictionary with the expected keys whose values satisfy the associated types.
    """

    def __init__(self, data: t.Dict[str, Type] = None, unknown_keys: bool = False,
                 key_type: Type = Any(), value_type: Type = Any()):
        """
        Creates a new instance.

        :param data: expected keys with the expected types of their associated values
        :param unknown_keys: allow keys that aren't in data?
        :param key_type: expected type of the keys that aren't in data
        :param value_type: expected type of the values of the keys that aren't in data
        """
        super().__init__()
        self.data = data or {}  # type: t.Dict[str, Type]
        self._validate_types(*self.data.values())
        self._validate_types(key_type, value_type)
        self.unknown_keys = unknown_keys  # type: bool
        """ Are keys allowed that aren't in data? """
        self.key_type = key_type  # type: Type
        self.value_type = value_type  # type: Type

    def _instancecheck_impl(self, value, info: Info) -> InfoMsg:
        if not isinstance(value, dict):
            return info.errormsg(self)
        for key, typ in self.data.items():
            key_info = info.add_to_name("[{!r}]".format(key))
            if key in value:
                res = typ.__instancecheck__(value[key], key_info)
                if not res:
                    return res
            elif not typ.__instancecheck__(_non_existent_val, key_info):
                return key_info.errormsg_non_existent(typ)
        for key in value:
            if key in self.data:
                continue
            if not self.unknown_keys:
                return info.errormsg_unexpected_key(self, key)
            res = self.key_type.__instancecheck__(key, info.add_to_name("(key={!r})".format(key)))
            if not res:
                return res
            res = self.value_type.__instancecheck__(value[key], info.add_to_name("[{!r}]".format(key)))
            if not res:
                return res
        return info.wrap(True)

    def __getitem__(self, key: str) -> Type:
        """
        Returns the type of the values of the passed key.
        """
        if key in self.data:
            return self.data[key]
        if self.unknown_keys:
            return self.value_type
        return NonExistent()

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def __str__(self) -> str:
        return "Dict({{{}}}, unknown_keys={})".format(
            ", ".join("{!r}: {}".format(key, typ) for key, typ in self.data.items()), self.unknown_keys)

    def _eq_impl(self, other: 'Dict') -> bool:
        return self.data == other.data and self.unknown_keys == other.unknown_keys

    def get_default(self) -> dict:
        default_dict = copy.deepcopy(self.default.default) if self.default is not None else {}
        for key, typ in self.data.items():
            if key not in default_dict and typ.has_default():
                default_dict[key] = typ.get_default()
        return default_dict

    def has_default(self) -> bool:
        return True

    def get_default_yaml(self, indents: int = 0, indentation: int = 4, str_list: bool = False,
                         defaults=None) -> t.Union[str, t.List[str]]:
        """
        Produce a YAML string with the descriptions of the keys as comments.
        Simple keys come first, nested dictionaries last.
        """
        if not self.data:
            return super().get_default_yaml(indents, indentation, str_list, defaults)
        if defaults is None:
            defaults = self.get_default()
        nested = sorted(key for key in self.data if _is_nested(self.data[key]))
        simple = sorted(key for key in self.data if key not in nested)
        strs = []
        for key in simple + nested:
            if key not in defaults:
                continue
            typ = self.data[key]
            strs.append("")
            if typ.description is not None:
                strs.extend("# " + line for line in typ.description.split("\n"))
            value_lines = typ.get_default_yaml(str_list=True, defaults=defaults[key])
            if len(value_lines) == 1 and not _is_nested(typ):
                strs.append("{}: {}".format(key, value_lines[0].strip()))
            else:
                strs.append("{}:".format(key))
                strs.extend(typ.get_default_yaml(1, indentation, str_list=True, defaults=defaults[key]))
        if not strs:
            strs = ["{}"]
        i_str = " " * indents * indentation
        strs = [i_str + line if line else line for line in strs]
        return strs if str_list else "\n".join(strs)


def _is_nested(typ: Type) -> bool:
    """ Is the passed type a dictionary with declared keys? """
    return isinstance(typ, Dict) and len(typ.data) > 0


def verbose_isinstance(value, type: t.Union[Type, type], value_name: str = None) -> InfoMsg:
    """
    Verbose version of isinstance that returns a InfoMsg object.

    :param value: value to check
    :param type: type or Type to check for
    :param value_name: name of the passed value (improves the error message)
    """
    if not isinstance(type, Type):
        type = T(type)
    return type.__instancecheck__(value, Info(value_name, value))


def typecheck(value, type: t.Union[Type, type], value_name: str = None):
    """
    Like verbose_isinstance but raises an error if the value hasn't the expected type.

    :raises: TypeError
    """
    res = verbose_isinstance(value, type, value_name)
    if not res:
        raise TypeError(str(res))
