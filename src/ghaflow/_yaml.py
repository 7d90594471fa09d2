import sys
from textwrap import dedent

import ruamel.yaml
from ruamel.yaml.representer import RoundTripRepresenter
from ruamel.yaml.scalarstring import LiteralScalarString


def multiline(string: str) -> str:
    """Dedents and converts to a multiline string"""
    return LiteralScalarString(dedent(string))


def literal(string: str) -> str:
    """Returns the string as a block scalar if it spans more than one line"""
    if "\n" in string.rstrip("\n"):
        return LiteralScalarString(string)
    return string


class NonAliasingRTRepresenter(RoundTripRepresenter):
    """Removes aliases so repeated values are written out in full"""

    def ignore_aliases(self, data: object):
        return True


def create_yaml() -> ruamel.yaml.YAML:
    """Returns a dumper for workflow files

    Long lines such as shell commands are never wrapped.
    """
    yaml = ruamel.yaml.YAML()
    yaml.Representer = NonAliasingRTRepresenter
    yaml.width = sys.maxsize
    yaml.indent(mapping=2, sequence=4, offset=2)
    return yaml
