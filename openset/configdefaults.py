from openset.configparser import (
    BoolParam,
    EnumStr,
    OpenSetConfigParser,
    _create_default_config,
)


def add_element_type_configvars(config: OpenSetConfigParser):
    config.add(
        "on_type_mismatch",
        "What to do when an intersection or difference is requested between "
        "sets whose declared element types have nothing in common: raise an "
        "ElementTypeError, warn and proceed, or proceed silently.",
        EnumStr("raise", ["warn", "ignore"]),
    )

    config.add(
        "check_element_types",
        "If True, Set.add rejects elements that are not instances of the "
        "set's declared element_type.",
        BoolParam(True),
    )


# Create the actual instance that holds the config values
config = _create_default_config()
add_element_type_configvars(config)
