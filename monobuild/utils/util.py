"""
Utility functions and classes that don't depend on the rest of the monobuild code base.
"""

import logging
import os
import sys
import typing as t

from rainbow_logging_handler import RainbowLoggingHandler


def recursive_exec_for_leafs(data: dict, func: t.Callable[[str, t.List[str], t.Any], None],
                             is_leaf: t.Callable[[t.List[str]], bool] = None, _path_prep: t.List[str] = None):
    """
    Executes the function for every leaf key (a key without any sub keys) of the data dict tree.
    Lists are leafs.

    :param data: dict tree
    :param func: function that gets passed the leaf key, the key path and the actual value
    :param is_leaf: optional function that declares the dict at the passed key path to be a leaf
    """
    _path_prep = _path_prep or []
    if not isinstance(data, dict):
        return
    for subkey in data.keys():
        path = _path_prep + [subkey]
        if type(data[subkey]) is dict and not (is_leaf is not None and is_leaf(path)):
            recursive_exec_for_leafs(data[subkey], func, is_leaf=is_leaf, _path_prep=path)
        else:
            func(subkey, path, data[subkey])


def join_strs(strs: t.Iterable[str], last_word: str = "and") -> str:
    """
    Joins the passed strings together with ", " except for the last two strings that are separated by the passed word.

    :param strs: strings to join
    :param last_word: passed word that is used between the two last strings
    """
    strs = list(strs)
    if len(strs) == 0:
        return ""
    if len(strs) == 1:
        return strs[0]
    return " {} ".format(last_word).join([", ".join(strs[0:-1]), strs[-1]])


def abspath(path: str, base: str = None) -> str:
    """
    Absolute version of the passed path, relative paths are resolved against the passed base directory
    (default: current working directory).
    """
    path = os.path.expanduser(path)
    if os.path.isabs(path) or base is None:
        return os.path.abspath(path)
    return os.path.abspath(os.path.join(base, path))


class Singleton(type):
    """
    Singleton meta class.
    @see http://stackoverflow.com/a/6798042
    """
    _instances = {}

    def __call__(cls, *args, **kwargs):
        if cls not in cls._instances:
            cls._instances[cls] = super(Singleton, cls).__call__(*args, **kwargs)
        return cls._instances[cls]


def progress(msg: str):
    """
    Print a progress message to standard out unless the log level only permits errors.
    """
    from monobuild.utils.settings import Settings
    if Settings().has_log_level("info"):
        print(msg, flush=True)


handler = RainbowLoggingHandler(sys.stderr, color_funcName=('black', 'yellow', True))
""" Colored logging handler that is used for the root logger """
handler.setFormatter(logging.Formatter("[%(asctime)s] %(message)s"))
logging.getLogger().addHandler(handler)
