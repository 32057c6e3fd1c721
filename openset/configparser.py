"""Configuration flags for openset.

Flags are declared with `OpenSetConfigParser.add` and read back as attributes
of the parser, e.g. ``config.on_type_mismatch``. A flag takes the first value
found among: an assignment at runtime (including `change_flags`), the
``OPENSET_FLAGS`` environment variable, the files listed in ``OPENSETRC``,
and finally its default.
"""

import logging
import os
import warnings
from collections.abc import Callable, Iterable
from configparser import ConfigParser, NoOptionError, NoSectionError
from functools import wraps
from io import StringIO
from pathlib import Path
from shlex import shlex


_logger = logging.getLogger("openset.configparser")


class OpenSetConfigWarning(Warning):
    @classmethod
    def warn(cls, message: str, stacklevel: int = 0):
        warnings.warn(message, cls, stacklevel=stacklevel + 3)


class ConfigAccessViolation(AttributeError):
    """A flag was read through a parser it is not registered on."""


class _ChangeFlagsDecorator:
    """Set flags for the duration of a ``with`` block or a decorated call."""

    def __init__(self, root: "OpenSetConfigParser", values: dict):
        self._root = root
        self._params = {name: root._params[name] for name in values}
        self._values = values
        self._saved: dict = {}

    def __call__(self, func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            with self:
                return func(*args, **kwargs)

        return wrapper

    def __enter__(self):
        owner = type(self._root)
        self._saved = {
            name: param.__get__(self._root, owner)
            for name, param in self._params.items()
        }
        try:
            for name, param in self._params.items():
                param.__set__(self._root, self._values[name])
        except Exception:
            _logger.error(f"Could not change flags {sorted(self._values)}")
            self._restore()
            raise
        return self

    def __exit__(self, *exc_info):
        self._restore()

    def _restore(self):
        for name, value in self._saved.items():
            self._params[name].__set__(self._root, value)


class OpenSetConfigParser:
    """Holds the current value of every registered flag."""

    # Registered by openset.configdefaults
    on_type_mismatch: str
    check_element_types: bool

    def __init__(self, flags: dict[str, str], files: ConfigParser):
        self._flags = flags
        self._files = files
        self._params: dict[str, ConfigParam] = {}

    def __str__(self, print_doc: bool = True) -> str:
        buf = StringIO()
        self.config_print(buf, print_doc=print_doc)
        return buf.getvalue()

    def config_print(self, buf, print_doc: bool = True):
        for param in self._params.values():
            lines = [str(param)]
            if print_doc:
                lines.append(f"    Doc:  {param.doc}")
            lines.append(f"    Value:  {param.__get__(self, type(self))}")
            print(*lines, sep="\n", end="\n\n", file=buf)

    def add(self, name: str, doc: str, param: "ConfigParam") -> None:
        """Register `param` as the flag `name`.

        `name` is either ``option``, looked up in the ``[global]`` section of
        the config files, or ``section__option``.
        """
        if "." in name:
            raise ValueError(
                f"Flag names use double underscores for sections, not dots: {name}"
            )
        param.name = name
        param.doc = doc
        self._params[name] = param

        if not callable(param.default) or self._has_user_value(name):
            # A bad user value fails at import, and its flag is consumed so
            # that warn_unused_flags skips it.
            param.__get__(self, type(self), consume=True)

        setattr(type(self), name, param)

    def _has_user_value(self, name: str) -> bool:
        try:
            self.fetch_val_for_key(name)
        except KeyError:
            return False
        return True

    def fetch_val_for_key(self, key: str, consume: bool = False) -> str:
        """Return the raw string the user set for `key`.

        ``OPENSET_FLAGS`` wins over the config files. With `consume`, a value
        found in ``OPENSET_FLAGS`` is removed from it.

        Raises
        ------
        KeyError
            If the user did not set `key`.
        """
        if key in self._flags:
            return self._flags.pop(key) if consume else self._flags[key]

        section, _, option = key.rpartition("__")
        try:
            return self._files.get(section or "global", option)
        except (NoSectionError, NoOptionError):
            raise KeyError(key) from None

    def change_flags(self, **values) -> _ChangeFlagsDecorator:
        """Temporarily change flags, as a context manager or a decorator."""
        return _ChangeFlagsDecorator(self, values)

    def warn_unused_flags(self):
        for key in self._flags:
            warnings.warn(f"openset does not recognise this flag: {key}")


class ConfigParam:
    """A flag, exposed as a descriptor on `OpenSetConfigParser`.

    Every value, whether assigned or read from the environment, is converted
    by `apply` and then checked by `validate`.

    Parameters
    ----------
    default : object or callable
        The value used when the user sets none. A callable is only called
        on first access.
    apply : callable, optional
        Converts a raw value, typically a string from ``OPENSET_FLAGS``.
    validate : callable, optional
        Returns False for values that are not acceptable.
    """

    def __init__(
        self,
        default: object | Callable[[], object],
        *,
        apply: Callable[[object], object] | None = None,
        validate: Callable[[object], bool] | None = None,
    ):
        self.default = default
        self._apply = apply
        self._validate = validate
        self.name = "unnamed"
        self.doc = ""

    def apply(self, value):
        if self._apply is None:
            return value
        return self._apply(value)

    def validate(self, value) -> bool:
        if self._validate is not None and self._validate(value) is False:
            raise ValueError(
                f"Invalid value ({value}) for configuration variable '{self.name}'."
            )
        return True

    def __get__(self, config, owner, consume: bool = False):
        if config is None:
            return self
        if config._params.get(self.name) is not self:
            raise ConfigAccessViolation(
                f"Flag '{self.name}' is not registered on the config object "
                f"with id {id(config)}"
            )
        if not hasattr(self, "value"):
            try:
                raw = config.fetch_val_for_key(self.name, consume=consume)
            except KeyError:
                raw = self.default() if callable(self.default) else self.default
            self.__set__(config, raw)
        return self.value

    def __set__(self, config, raw):
        value = self.apply(raw)
        self.validate(value)
        self.value = value


class EnumStr(ConfigParam):
    """A string flag restricted to `default` and the extra `options`."""

    def __init__(self, default: str, options: Iterable[str], validate=None):
        self.all = {default, *options}
        for option in self.all:
            if not isinstance(option, str):
                raise ValueError(f"Non-str value '{option}' for an EnumStr parameter.")
        super().__init__(default, apply=self._choose, validate=validate)

    def _choose(self, value):
        if value not in self.all:
            raise ValueError(
                f"Invalid value ('{value}') for configuration variable "
                f"'{self.name}'. Valid options are {sorted(self.all)}"
            )
        return value

    def __str__(self):
        return f"{self.name} ({', '.join(sorted(self.all))}) "


class BoolParam(ConfigParam):
    """A boolean flag. Accepts bools, 0 and 1, and their string spellings."""

    _true = {True, "1", "true", "True"}
    _false = {False, "0", "false", "False"}

    def __init__(self, default, validate=None):
        super().__init__(default, apply=self._to_bool, validate=validate)

    def _to_bool(self, value) -> bool:
        if value in self._true:
            return True
        if value in self._false:
            return False
        raise ValueError(
            f"Invalid value ({value}) for configuration variable '{self.name}'."
        )

    def __str__(self):
        return f"{self.name} (bool) "


def parse_config_string(
    config_string: str, issue_warnings: bool = True
) -> dict[str, str]:
    """Parse comma-separated ``key=value`` pairs, as found in ``OPENSET_FLAGS``.

    Values may be quoted to contain commas. A key given twice keeps its last
    value.
    """
    lexer = shlex(config_string, posix=True)
    lexer.whitespace = ","
    lexer.whitespace_split = True
    flags = {}
    for entry in map(str.strip, lexer):
        if not entry:
            continue
        key, sep, value = entry.partition("=")
        if not sep:
            if issue_warnings:
                OpenSetConfigWarning.warn(
                    f"Config key '{key}' has no value, ignoring it", stacklevel=1
                )
            continue
        flags[key] = value
    return flags


def config_files_from_opensetrc() -> list[Path]:
    """The INI files named by ``OPENSETRC``, ``~/.opensetrc`` by default.

    Several files are separated with `os.pathsep`; later files override
    earlier ones.
    """
    paths = os.getenv("OPENSETRC", "~/.opensetrc")
    return [Path(path).expanduser() for path in paths.split(os.pathsep)]


def _create_default_config() -> OpenSetConfigParser:
    flags = parse_config_string(os.getenv("OPENSET_FLAGS", ""))
    files = ConfigParser(interpolation=None)
    files.read(config_files_from_opensetrc())
    return OpenSetConfigParser(flags=flags, files=files)
