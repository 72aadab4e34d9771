from __future__ import annotations
from logicsim import Const


def pincount(value, default: int) -> int:
    # a missing or null count keeps the default
    return default if value is None else max(0, int(value))


class Node:
    # a vertex of the circuit graph
    # holds its own pin counts and whatever value it is told to hold
    # the kind decides how inputs turn into outputs
    __slots__ = ['id', 'kind', 'label', 'inputcount', 'outputcount', 'pins']
    KIND = None

    def __init__(self, id: str = '', kind: str | None = None, label: str = ''):
        self.id = id
        self.kind = kind if kind is not None else self.KIND
        # how many pins on each side
        self.inputcount, self.outputcount = Const.GATE_CONFIGS.get(self.kind, (0, 1))
        self.label = label
        # optional pin names, "input-0" / "output-0" -> name
        self.pins: dict[str, str] = {}

    def __repr__(self):
        return self.label if self.label else f'{self.kind}-{self.id}'

    def __str__(self):
        return self.__repr__()

    # calculates the output vector from the ordered input vector
    def process(self, inputs: list[bool], modules=None, chain=()) -> list[bool]:
        # unrecognized kinds stay low
        return [False]

    def copy(self) -> Node:
        clone = object.__new__(self.__class__)
        for cls in self.__class__.__mro__:
            for slot in getattr(cls, '__slots__', ()):
                if hasattr(self, slot):
                    value = getattr(self, slot)
                    setattr(clone, slot, list(value) if isinstance(value, list) else value)
        clone.pins = dict(self.pins)
        return clone

    def json_data(self) -> dict:
        dictionary = {
            Const.ID: self.id,
            Const.TYPE: self.kind,
            Const.LABEL: self.label,
            Const.INPUTCOUNT: self.inputcount,
            Const.OUTPUTCOUNT: self.outputcount,
        }
        if self.pins:
            dictionary[Const.PINNAMES] = dict(self.pins)
        return dictionary

    def clone(self, dictionary: dict) -> Node:
        self.id = dictionary[Const.ID]
        self.label = dictionary.get(Const.LABEL, '')
        self.inputcount = pincount(dictionary.get(Const.INPUTCOUNT), self.inputcount)
        self.outputcount = pincount(dictionary.get(Const.OUTPUTCOUNT), self.outputcount)
        self.pins = dict(dictionary.get(Const.PINNAMES) or {})
        return self


class AND(Node):
    __slots__ = ()
    KIND = Const.AND

    def process(self, inputs, modules=None, chain=()):
        if len(inputs) < 2:
            return [False]
        return [inputs[0] and inputs[1]]


class OR(Node):
    __slots__ = ()
    KIND = Const.OR

    def process(self, inputs, modules=None, chain=()):
        if len(inputs) < 2:
            return [False]
        return [inputs[0] or inputs[1]]


class NOT(Node):
    __slots__ = ()
    KIND = Const.NOT

    def process(self, inputs, modules=None, chain=()):
        # a NOT with nothing to read inverts a missing low
        return [not (inputs[0] if inputs else False)]


class Input(Node):
    # a switch, its output ignores the wiring entirely
    __slots__ = ['value']
    KIND = Const.INPUT

    def __init__(self, id: str = '', value: bool = False, label: str = ''):
        super().__init__(id, label=label)
        self.value = value

    def toggle(self, value: bool):
        self.value = bool(value)

    def process(self, inputs, modules=None, chain=()):
        return [self.value]

    def json_data(self):
        dictionary = super().json_data()
        dictionary[Const.INPUTVALUE] = self.value
        return dictionary

    def clone(self, dictionary):
        super().clone(dictionary)
        self.value = bool(dictionary.get(Const.INPUTVALUE, False))
        return self


class Button(Input):
    __slots__ = ()
    KIND = Const.BUTTON


class Output(Node):
    __slots__ = ()
    KIND = Const.OUTPUT

    def process(self, inputs, modules=None, chain=()):
        return [inputs[0] if inputs else False]


class LED(Output):
    __slots__ = ()
    KIND = Const.LED


class PinBar(Node):
    # a multi-pin connector
    # input mode: a source holding one bit per output pin
    # output mode: a sink passing its input pins straight through
    __slots__ = ['mode', 'values']
    KIND = Const.PINBAR

    def __init__(self, id: str = '', mode: str = Const.INPUT_MODE, count: int | None = None,
                 values: list[bool] | None = None, label: str = ''):
        super().__init__(id, label=label)
        self.mode = mode
        self.values: list[bool] = list(values) if values else []
        self.setlimits(count if count is not None else max(self.inputcount, self.outputcount))

    def setlimits(self, size: int):
        # a bar's width lives on whichever side it drives
        if self.mode == Const.OUTPUT_MODE:
            self.inputcount, self.outputcount = size, 0
        else:
            self.inputcount, self.outputcount = 0, size

    def toggle(self, value: bool, index: int):
        while len(self.values) <= index:
            self.values.append(False)
        self.values[index] = bool(value)

    def process(self, inputs, modules=None, chain=()):
        if self.mode == Const.OUTPUT_MODE:
            result = list(inputs[:self.inputcount])
            return result + [False] * (self.inputcount - len(result))
        return [bool(self.values[i]) if i < len(self.values) and self.values[i] is not None else False
                for i in range(self.outputcount)]

    def json_data(self):
        dictionary = super().json_data()
        dictionary[Const.PINBARMODE] = self.mode
        dictionary[Const.PINBARVALUES] = list(self.values)
        return dictionary

    def clone(self, dictionary):
        super().clone(dictionary)
        self.mode = dictionary.get(Const.PINBARMODE) or Const.INPUT_MODE
        self.values = list(dictionary.get(Const.PINBARVALUES) or [])
        return self


class Connection:
    # a single-bit wire from an output pin to an input pin
    __slots__ = ['id', 'source', 'output', 'target', 'index']

    def __init__(self, id: str = '', source: str = '', output: int = 0, target: str = '', index: int = 0):
        self.id = id
        self.source = source
        self.output = output
        self.target = target
        self.index = index

    def __repr__(self):
        return f'{self.id}: {self.source}[{self.output}] -> {self.target}[{self.index}]'

    def json_data(self) -> dict:
        return {
            Const.ID: self.id,
            Const.FROMNODE: self.source,
            Const.FROMPIN: self.output,
            Const.TONODE: self.target,
            Const.TOPIN: self.index,
        }

    def clone(self, dictionary: dict) -> Connection:
        self.id = dictionary[Const.ID]
        self.source = dictionary[Const.FROMNODE]
        self.output = int(dictionary.get(Const.FROMPIN) or 0)
        self.target = dictionary[Const.TONODE]
        self.index = int(dictionary.get(Const.TOPIN) or 0)
        return self
