from __future__ import annotations
from logicsim import Const
from logicsim import Gates
from logicsim.IC import Module, ModuleDefinition


class FormatError(ValueError):
    """A saved circuit is missing something it cannot do without."""


class Components:
    # A shelf where we keep all the component blueprints
    # This helps us create new nodes by just asking for them by kind
    gateobjects = {
        Const.AND    : Gates.AND,
        Const.OR     : Gates.OR,
        Const.NOT    : Gates.NOT,
        Const.INPUT  : Gates.Input,
        Const.BUTTON : Gates.Button,
        Const.OUTPUT : Gates.Output,
        Const.LED    : Gates.LED,
        Const.PINBAR : Gates.PinBar,
        Const.MODULE : Module,
    }

    @classmethod
    def get(cls, choice: str) -> Gates.Node:
        if choice not in cls.gateobjects:
            # kept as a plain node, it evaluates low
            return Gates.Node(kind=choice)
        return cls.gateobjects[choice]()


def get(choice: str) -> Gates.Node:
    return Components.get(choice)


def decode(dictionary: dict) -> Gates.Node:
    if Const.ID not in dictionary or Const.TYPE not in dictionary:
        raise FormatError(f'node needs "{Const.ID}" and "{Const.TYPE}": {dictionary!r}')
    return get(dictionary[Const.TYPE]).clone(dictionary)


def decode_connection(dictionary: dict) -> Gates.Connection:
    for key in (Const.ID, Const.FROMNODE, Const.TONODE):
        if key not in dictionary:
            raise FormatError(f'connection needs "{key}": {dictionary!r}')
    return Gates.Connection().clone(dictionary)


def decode_module(dictionary: dict) -> ModuleDefinition:
    if Const.ID not in dictionary:
        raise FormatError(f'module needs "{Const.ID}"')
    return ModuleDefinition().clone(dictionary)


def library(modules) -> dict[str, ModuleDefinition]:
    """Module definitions keyed by id, from a list or an existing mapping."""
    if modules is None:
        return {}
    if isinstance(modules, dict):
        return modules
    table = {}
    for definition in modules:
        table.setdefault(definition.id, definition)
    return table


def instance(definition: ModuleDefinition, id: str, label: str = '') -> Module:
    # a fresh MODULE node sized to the definition's pins
    return Module(id, definition.id, definition.inputcount, definition.outputcount,
                  label=label or definition.name)
