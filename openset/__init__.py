"""
openset provides `Set`, a hash set designed to be subclassed.

Unlike the built-in ``set``, every insertion and removal goes through the
overridable `Set.add` and `Set.delete` methods, so a subclass can maintain
extra state (see `openset.words.WordSet`) while reusing the base storage and
set algebra.

To learn more, check out:

- `openset.set.Set` for the set operations
- `openset.configdefaults` for the configuration flags

"""

__docformat__ = "restructuredtext en"

# Set a default logger. It is important to do this before importing some other
# openset code, since this code may want to log some messages.
import logging


__version__: str = "0.1.0"


openset_logger = logging.getLogger("openset")
logging_default_handler = logging.StreamHandler()
logging_default_formatter = logging.Formatter(
    fmt="%(levelname)s (%(name)s): %(message)s"
)
logging_default_handler.setFormatter(logging_default_formatter)
openset_logger.setLevel(logging.WARNING)

if not openset_logger.hasHandlers():
    openset_logger.addHandler(logging_default_handler)


# Disable default log handler added to openset_logger when the module
# is imported.
def disable_log_handler(logger=openset_logger, handler=logging_default_handler):
    if logger.hasHandlers():
        logger.removeHandler(handler)


from openset.configdefaults import config


# isort: off
from openset.element_types import ElementTypeError, ElementTypeWarning
from openset.set import Set, SetIterator, to_set
from openset.words import WordSet

# isort: on


# Config variables are all registered by now. Warn about remaining flags
# provided by the user through OPENSET_FLAGS.
config.warn_unused_flags()
