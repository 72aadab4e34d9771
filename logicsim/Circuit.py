from __future__ import annotations
import json
import logging
from logicsim import Const
from logicsim.Gates import Node, Connection, Input, PinBar
from logicsim.IC import ModuleDefinition, package
from logicsim.Rank import index, rank, drivers, detect_cycle_connections, would_create_cycle
from logicsim.Store import FormatError, decode, decode_connection, decode_module, library

logger = logging.getLogger(__name__)


def evaluate(nodes: list[Node], connections: list[Connection], modules=None,
             previous: dict[str, list[bool]] | None = None, chain: tuple[str, ...] = ()) -> dict[str, list[bool]]:
    """Compute the output vector of every node.

    Acyclic nodes run first in dependency order and read live values, except
    from feedback nodes, which they read from a frozen table seeded with
    ``previous``. The feedback nodes then run once against the frozen table
    only, so their order does not matter: one call is one tick of memory.

    ``chain`` holds the module ids being expanded above this call.
    """
    modules = library(modules)
    arena, handles, forward, backward = index(nodes, connections)
    order, cycle = rank(forward, backward)
    size = len(arena)

    # one lookup per input pin: (source handle, source pin) or None
    wires = drivers([c for c in connections if c.source in handles and c.target in handles])
    sources: list[list[tuple[int, int] | None]] = []
    for node in arena:
        pins = []
        for i in range(node.inputcount):
            conn = wires.get((node.id, i))
            pins.append((handles[conn.source], conn.output) if conn else None)
        sources.append(pins)

    live: list[list[bool] | None] = [None] * size
    frozen: list[list[bool] | None] = [None] * size
    if previous:
        for h in cycle:
            vector = previous.get(arena[h].id)
            if vector is not None:
                live[h] = list(vector)
                frozen[h] = list(vector)

    def read(table, wire):
        if wire is None:
            return False
        vector = table[wire[0]]
        if vector is None or not 0 <= wire[1] < len(vector):
            return False
        return bool(vector[wire[1]])

    acyclic = order[:size - len(cycle)]
    for h in acyclic:
        values = [read(frozen if wire and wire[0] in cycle else live, wire) for wire in sources[h]]
        live[h] = arena[h].process(values, modules, chain)

    for h in acyclic:
        frozen[h] = live[h]

    for h in order[size - len(cycle):]:
        values = [read(frozen, wire) for wire in sources[h]]
        live[h] = arena[h].process(values, modules, chain)

    logger.debug(f"Evaluated {size} nodes ({len(cycle)} in feedback), depth {len(chain)}")
    return {arena[h].id: live[h] for h in range(size)}


def bits(vector) -> str:
    if not vector:
        return '-'
    return ''.join('T' if bit else 'F' for bit in vector)


class Circuit:
    # the board the caller keeps between edits
    # it holds the snapshot, the module library and the last result
    __slots__ = ['nodes', 'connections', 'modules', 'results', 'counter']

    def __init__(self, nodes: list[Node] | None = None, connections: list[Connection] | None = None,
                 modules=None):
        self.nodes: list[Node] = nodes if nodes is not None else []
        self.connections: list[Connection] = connections if connections is not None else []
        self.modules: dict[str, ModuleDefinition] = dict(library(modules))
        # last evaluation, fed back so feedback loops keep their state
        self.results: dict[str, list[bool]] = {}
        self.counter = 0

    def __repr__(self):
        return 'Circuit'

    def getobj(self, id: str) -> Node | None:
        for node in self.nodes:
            if node.id == id:
                return node
        return None

    def add(self, node: Node) -> Node:
        self.nodes.append(node)
        return node

    def connect(self, source: str, output: int, target: str, index: int,
                allow_cycles: bool = True) -> Connection | None:
        if not allow_cycles and would_create_cycle(self.connections, source, target):
            return None
        self.counter += 1
        conn = Connection(f'c{self.counter}', source, output, target, index)
        while any(c.id == conn.id for c in self.connections):
            self.counter += 1
            conn.id = f'c{self.counter}'
        self.connections.append(conn)
        return conn

    def tick(self) -> dict[str, list[bool]]:
        self.results = evaluate(self.nodes, self.connections, self.modules, self.results)
        return self.results

    # switches an input, or one pin of an input bar, on or off
    # a bar needs the pin, without one nothing changes
    def toggle(self, id: str, value: bool, pin: int | None = None) -> bool:
        node = self.getobj(id)
        if isinstance(node, Input):
            node.toggle(value)
            return True
        if isinstance(node, PinBar) and node.mode == Const.INPUT_MODE and pin is not None:
            node.toggle(value, pin)
            return True
        return False

    def output(self, id: str) -> list[bool]:
        return self.results.get(id, [])

    def cycles(self) -> list[str]:
        return detect_cycle_connections(self.nodes, self.connections)

    def varlist(self) -> list[Input]:
        return [node for node in self.nodes if isinstance(node, Input)]

    # generates a truth table for all possible inputs
    def truthTable(self) -> str:
        variables = self.varlist()
        if len(variables) == 0:
            return ''
        saved = [v.value for v in variables]
        gate_list = [node for node in self.nodes if not isinstance(node, Input)]

        n = len(variables)
        all_names = [str(v) for v in variables] + [str(g) for g in gate_list]
        col_width = max(max(len(name) for name in all_names), 4) + 2

        header = " | ".join(name.center(col_width) for name in all_names)
        separator = "─" * len(header)

        Table = [separator + '\n', header + '\n', separator + '\n']
        for i in range(1 << n):
            inputs = []
            for j, var in enumerate(variables):
                bit = bool(i & (1 << (n - j - 1)))
                var.toggle(bit)
                inputs.append("1" if bit else "0")
            self.tick()
            row_data = inputs + [bits(self.output(g.id)) for g in gate_list]
            Table.append(" | ".join(val.center(col_width) for val in row_data) + '\n')
        Table.append(separator + '\n')

        for var, value in zip(variables, saved):
            var.toggle(value)
        self.tick()
        return "".join(Table)

    # prints a detailed report of everything going on
    def diagnose(self):
        print("=" * 90)
        print(" " * 35 + "CIRCUIT DIAGNOSIS")
        print("=" * 90)

        feedback = set(self.cycles())
        columns = [
            ("Component", 20),
            ("Kind", 9),
            ("Sources", 34),
            ("Loop", 6),
            ("Out", 12),
        ]
        total_width = sum(w for _, w in columns)
        fmt = "".join(f"{{:<{w}}}" for _, w in columns)
        print("\n" + fmt.format(*[n for n, _ in columns]))
        print("-" * total_width)

        wires = drivers(self.connections)
        for node in self.nodes:
            ch = [f"[{i}]:{wires[(node.id, i)].source}" for i in range(node.inputcount) if (node.id, i) in wires]
            ch_str = ", ".join(ch) if ch else "None"
            ch_str = ch_str[:32] + ".." if len(ch_str) > 34 else ch_str
            loop = any(c.id in feedback for c in self.connections if c.target == node.id)
            print(fmt.format(str(node)[:19], node.kind, ch_str, "yes" if loop else "", bits(self.output(node.id))))
        print("-" * total_width)

        if self.modules:
            print("\n" + "=" * 90)
            print(" " * 38 + "MODULE LIBRARY")
            print("=" * 90)
            for definition in self.modules.values():
                definition.info()
        print("\n" + "=" * 90)

    def json_data(self) -> dict:
        return {
            Const.NODES: [node.json_data() for node in self.nodes],
            Const.CONNECTIONS: [conn.json_data() for conn in self.connections],
            Const.MODULES: [definition.json_data() for definition in self.modules.values()],
        }

    def writetojson(self, location):
        with open(location, 'w') as file:
            json.dump(self.json_data(), file, indent=2)

    def readfromjson(self, location):
        with open(location, 'r') as file:
            circuit = json.load(file)
        self.load(circuit)

    def load(self, circuit: dict):
        if not isinstance(circuit, dict):
            raise FormatError(f"expected an object with \"{Const.NODES}\" and \"{Const.CONNECTIONS}\"")
        self.nodes = [decode(i) for i in circuit.get(Const.NODES, [])]
        self.connections = [decode_connection(i) for i in circuit.get(Const.CONNECTIONS, [])]
        self.modules = {}
        for i in circuit.get(Const.MODULES, []):
            definition = decode_module(i)
            self.modules.setdefault(definition.id, definition)
        self.results = {}
        logger.debug(f"Loaded {len(self.nodes)} nodes, {len(self.connections)} connections, "
                     f"{len(self.modules)} modules")

    # packages the current circuit into a module and writes it out
    def save_as_module(self, location, name: str = 'Module') -> ModuleDefinition:
        definition = package(name, self.nodes, self.connections)
        with open(location, 'w') as file:
            json.dump(definition.json_data(), file, indent=2)
        return definition

    def getmodule(self, location) -> ModuleDefinition:
        with open(location, 'r') as file:
            definition = decode_module(json.load(file))
        self.modules[definition.id] = definition
        return definition

    def clearcircuit(self):
        self.nodes = []
        self.connections = []
        self.results = {}
