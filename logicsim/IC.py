"""Modules: reusable sub-circuits and the node that instantiates them."""
from __future__ import annotations
import copy
import logging
import uuid
from logicsim import Const
from logicsim.Gates import Node, Connection
from logicsim.Rank import drivers

logger = logging.getLogger(__name__)


class ModuleError(Exception):
    """A module definition cannot be built or expanded."""


class CyclicModuleError(ModuleError):
    """A module contains an instance of itself, directly or through others."""

    def __init__(self, chain: tuple[str, ...]):
        self.chain = chain
        super().__init__('cyclic module definition: ' + ' -> '.join(chain))


class ModuleDefinition:
    """A named circuit that can be placed as a single MODULE node.

    ``inputs`` and ``outputs`` list the ids of the internal terminals in the
    order their pins appear on the outside. An INPUT or OUTPUT terminal
    accounts for one pin, a PINBAR for its whole width.
    """
    __slots__ = ['id', 'name', 'nodes', 'connections', 'inputs', 'outputs',
                 'inputcount', 'outputcount', 'inputnames', 'outputnames']

    def __init__(self, id: str = '', name: str = '', nodes: list[Node] | None = None,
                 connections: list[Connection] | None = None,
                 inputs: list[str] | None = None, outputs: list[str] | None = None,
                 inputcount: int | None = None, outputcount: int | None = None):
        self.id = id
        self.name = name
        self.nodes: list[Node] = nodes if nodes is not None else []
        self.connections: list[Connection] = connections if connections is not None else []
        self.inputs: list[str] = inputs if inputs is not None else []
        self.outputs: list[str] = outputs if outputs is not None else []
        counted_in, counted_out = self.count()
        self.inputcount = counted_in if inputcount is None else inputcount
        self.outputcount = counted_out if outputcount is None else outputcount
        self.inputnames: list[str] = []
        self.outputnames: list[str] = []

    def __repr__(self):
        return f'{self.name} ({self.inputcount}->{self.outputcount})'

    def lookup(self) -> dict[str, Node]:
        table = {}
        for node in self.nodes:
            table.setdefault(node.id, node)
        return table

    def count(self) -> tuple[int, int]:
        # external pin totals, a bar counts for its whole width
        table = self.lookup()
        inputcount = 0
        for terminal_id in self.inputs:
            terminal = table.get(terminal_id)
            if terminal is not None:
                inputcount += terminal.outputcount if terminal.kind == Const.PINBAR else 1
        outputcount = 0
        for terminal_id in self.outputs:
            terminal = table.get(terminal_id)
            if terminal is not None:
                outputcount += terminal.inputcount if terminal.kind == Const.PINBAR else 1
        return inputcount, outputcount

    def info(self):
        print(f"\n  MODULE: {self.name} (id: {self.id}) {self.inputcount} in / {self.outputcount} out")
        print("  " + "-" * 40)
        table = self.lookup()
        for label, ids in (("INPUTS", self.inputs), ("OUTPUTS", self.outputs)):
            if ids:
                print(f"  {label}:")
                for terminal_id in ids:
                    print(f"    {table.get(terminal_id, terminal_id)}")
        print(f"  INTERNAL: {len(self.nodes)} nodes, {len(self.connections)} connections")
        print("  " + "-" * 40)

    def json_data(self) -> dict:
        return {
            Const.ID: self.id,
            Const.NAME: self.name,
            Const.NODES: [node.json_data() for node in self.nodes],
            Const.CONNECTIONS: [conn.json_data() for conn in self.connections],
            Const.INPUTNODES: list(self.inputs),
            Const.OUTPUTNODES: list(self.outputs),
            Const.INPUTCOUNT: self.inputcount,
            Const.OUTPUTCOUNT: self.outputcount,
            Const.INPUTNAMES: list(self.inputnames),
            Const.OUTPUTNAMES: list(self.outputnames),
        }

    def clone(self, dictionary: dict) -> ModuleDefinition:
        from logicsim.Store import decode, decode_connection
        self.id = dictionary[Const.ID]
        self.name = dictionary.get(Const.NAME, '')
        self.nodes = [decode(i) for i in dictionary.get(Const.NODES, [])]
        self.connections = [decode_connection(i) for i in dictionary.get(Const.CONNECTIONS, [])]
        self.inputs = list(dictionary.get(Const.INPUTNODES, []))
        self.outputs = list(dictionary.get(Const.OUTPUTNODES, []))
        counted_in, counted_out = self.count()
        self.inputcount = dictionary.get(Const.INPUTCOUNT, counted_in)
        self.outputcount = dictionary.get(Const.OUTPUTCOUNT, counted_out)
        self.inputnames = list(dictionary.get(Const.INPUTNAMES) or [])
        self.outputnames = list(dictionary.get(Const.OUTPUTNAMES) or [])
        return self


class Module(Node):
    # an instance of a module definition, expanded on every evaluation
    __slots__ = ['module']
    KIND = Const.MODULE

    def __init__(self, id: str = '', module: str = '', inputcount: int = 0, outputcount: int = 0,
                 label: str = ''):
        super().__init__(id, label=label)
        self.module = module
        self.inputcount = inputcount
        self.outputcount = outputcount

    def slots(self, definition: ModuleDefinition) -> dict[str, tuple[int, int]]:
        """Where each input terminal's bits start in the flattened input vector."""
        table = definition.lookup()
        slots = {}
        cursor = 0
        for terminal_id in definition.inputs:
            terminal = table.get(terminal_id)
            if terminal is None:
                continue
            if terminal.kind == Const.INPUT:
                width = 1
            elif terminal.kind == Const.PINBAR:
                width = terminal.outputcount
            else:
                continue
            slots[terminal_id] = (cursor, width)
            cursor += width
        return slots

    def inject(self, definition: ModuleDefinition, inputs: list[bool]) -> list[Node]:
        """Copy the definition's nodes with the outer signals written into its terminals."""
        slots = self.slots(definition)

        def bit(i):
            return inputs[i] if i < len(inputs) else False

        working = []
        for node in definition.nodes:
            node = node.copy()
            if node.id in slots:
                start, width = slots[node.id]
                if node.kind == Const.INPUT:
                    node.value = bit(start)
                elif node.kind == Const.PINBAR and node.mode == Const.INPUT_MODE:
                    node.values = [bit(start + i) for i in range(width)]
            working.append(node)
        return working

    def process(self, inputs, modules=None, chain=()):
        definition = modules.get(self.module) if modules else None
        if definition is None:
            logger.warning(f"Module {self.module!r} for node {self.id} not found")
            return [False] * self.outputcount
        if definition.id in chain:
            raise CyclicModuleError(tuple(chain) + (definition.id,))

        from logicsim.Circuit import evaluate
        working = self.inject(definition, inputs)
        # no previous outputs cross the module boundary, internal feedback restarts each pass
        results = evaluate(working, definition.connections, modules, chain=tuple(chain) + (definition.id,))

        def read(node_id, pin):
            vector = results.get(node_id, ())
            return vector[pin] if pin < len(vector) else False

        table = definition.lookup()
        wires = drivers([c for c in definition.connections if c.source in table and c.target in table])
        output = []
        for terminal_id in definition.outputs:
            terminal = table.get(terminal_id)
            if terminal is not None and terminal.kind == Const.PINBAR and terminal.mode == Const.OUTPUT_MODE:
                # a bar's pins are traced back through the internal wiring
                for pin in range(terminal.inputcount):
                    conn = wires.get((terminal_id, pin))
                    output.append(read(conn.source, conn.output) if conn else False)
            else:
                output.append(read(terminal_id, 0))
        return output

    def json_data(self):
        dictionary = super().json_data()
        dictionary[Const.MODULEID] = self.module
        return dictionary

    def clone(self, dictionary):
        super().clone(dictionary)
        self.module = dictionary.get(Const.MODULEID) or ''
        return self


def terminals(nodes: list[Node]) -> tuple[list[Node], list[Node]]:
    """The nodes that become a module's input and output pins, in list order."""
    inputs = [n for n in nodes if n.kind == Const.INPUT
              or (n.kind == Const.PINBAR and n.mode == Const.INPUT_MODE)]
    outputs = [n for n in nodes if n.kind == Const.OUTPUT
               or (n.kind == Const.PINBAR and n.mode == Const.OUTPUT_MODE)]
    return inputs, outputs


def pinnames(inputs: list[Node], outputs: list[Node]) -> tuple[list[str], list[str]]:
    inputnames = []
    for n in inputs:
        if n.kind == Const.INPUT:
            inputnames.append(n.pins.get('output-0') or n.label or 'Input')
        else:
            inputnames.extend(n.pins.get(f'output-{i}') or f'Bar {i}' for i in range(n.outputcount))
    outputnames = []
    for n in outputs:
        if n.kind == Const.OUTPUT:
            outputnames.append(n.pins.get('input-0') or n.label or 'Output')
        else:
            outputnames.extend(n.pins.get(f'input-{i}') or f'Bar {i}' for i in range(n.inputcount))
    return inputnames, outputnames


def package(name: str, nodes: list[Node], connections: list[Connection], id: str | None = None) -> ModuleDefinition:
    """Turn a whole circuit into a module definition.

    The definition gets private copies of the nodes and connections, so
    later edits to the circuit do not leak into it.
    """
    inputs, outputs = terminals(nodes)
    if not inputs or not outputs:
        raise ModuleError('a module needs at least one input (INPUT or input PINBAR) '
                          'and one output (OUTPUT or output PINBAR)')
    if not name or not name.strip():
        raise ModuleError('a module needs a name')

    definition = ModuleDefinition(
        id=id or uuid.uuid4().hex,
        name=name.strip(),
        nodes=[node.copy() for node in nodes],
        connections=copy.deepcopy(connections),
        inputs=[n.id for n in inputs],
        outputs=[n.id for n in outputs],
    )
    definition.inputnames, definition.outputnames = pinnames(inputs, outputs)
    logger.debug(f"Packaged module {definition.name} ({definition.inputcount} -> {definition.outputcount})")
    return definition
