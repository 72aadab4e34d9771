"""
LOGICSIM — CIRCUIT & IO TEST SUITE
The caller-side board: ticking with memory, toggling, truth tables, JSON files and the CLI.
"""

import contextlib
import io
import json
import os
import tempfile
import unittest

from logicsim import Const
from logicsim.CLI import main
from logicsim.Circuit import Circuit
from logicsim.Gates import Connection, AND, NOT, Input, Output, PinBar
from logicsim.IC import ModuleError
from logicsim.Store import FormatError, decode, decode_connection, get, instance


# A sandbox export as the browser app writes it
SANDBOX = {
    "nodes": [
        {"id": "a", "type": "INPUT", "x": 0, "y": 0, "label": "A", "inputCount": 0, "outputCount": 1, "inputValue": True},
        {"id": "b", "type": "INPUT", "x": 0, "y": 60, "label": "B", "inputCount": 0, "outputCount": 1},
        {"id": "g", "type": "AND", "x": 100, "y": 0, "label": "G", "inputCount": 2, "outputCount": 1},
        {"id": "y", "type": "OUTPUT", "x": 200, "y": 0, "label": "Y", "inputCount": 1, "outputCount": 0},
        {"id": "n", "type": "NOT", "x": 100, "y": 200, "label": "N", "inputCount": 1, "outputCount": 1},
    ],
    "connections": [
        {"id": "c1", "fromNodeId": "a", "fromPinIndex": 0, "toNodeId": "g", "toPinIndex": 0},
        {"id": "c2", "fromNodeId": "b", "fromPinIndex": 0, "toNodeId": "g", "toPinIndex": 1},
        {"id": "c3", "fromNodeId": "g", "fromPinIndex": 0, "toNodeId": "y", "toPinIndex": 0},
        {"id": "c4", "fromNodeId": "n", "fromPinIndex": 0, "toNodeId": "n", "toPinIndex": 0},
    ],
    "modules": [],
}


class TestCircuit(unittest.TestCase):
    def setUp(self):
        """Initialize a fresh board for each test."""
        self.circuit = Circuit()
        self.circuit.load(json.loads(json.dumps(SANDBOX)))

    # ==========================================
    # 1. TICKING & TOGGLING
    # ==========================================

    def test_tick_keeps_feedback_memory(self):
        seen = [self.circuit.tick()['n'] for _ in range(4)]
        self.assertEqual(seen, [[True], [False], [True], [False]])

    def test_toggle_input(self):
        self.circuit.tick()
        self.assertEqual(self.circuit.output('y'), [False])
        self.assertTrue(self.circuit.toggle('b', True))
        self.circuit.tick()
        self.assertEqual(self.circuit.output('y'), [True])

    def test_toggle_bar_pin_and_refusals(self):
        self.circuit.add(PinBar('bar', count=2))
        self.assertTrue(self.circuit.toggle('bar', True, 1))
        self.assertEqual(self.circuit.tick()['bar'], [False, True])
        self.assertFalse(self.circuit.toggle('g', True))
        self.assertFalse(self.circuit.toggle('missing', True))

    def test_bar_toggle_needs_a_pin(self):
        """Without a pin index an input bar is left untouched."""
        self.circuit.add(PinBar('bar', count=2))
        self.assertFalse(self.circuit.toggle('bar', True))
        self.assertEqual(self.circuit.tick()['bar'], [False, False])
        self.assertTrue(self.circuit.toggle('bar', True, 0))
        self.assertEqual(self.circuit.tick()['bar'], [True, False])

    def test_connect_respects_cycle_policy(self):
        self.assertIsNone(self.circuit.connect('y', 0, 'a', 0, allow_cycles=False))
        self.assertIsNone(self.circuit.connect('g', 0, 'g', 0, allow_cycles=False))
        conn = self.circuit.connect('g', 0, 'n', 0)
        self.assertIsNotNone(conn)
        self.assertNotIn(conn.id, ['c1', 'c2', 'c3', 'c4'])
        self.assertIn(conn, self.circuit.connections)

    def test_cycles(self):
        self.assertEqual(self.circuit.cycles(), ['c4'])

    def test_output_before_tick_is_empty(self):
        self.assertEqual(self.circuit.output('y'), [])

    # ==========================================
    # 2. REPORTS
    # ==========================================

    def test_truth_table(self):
        board = Circuit([Input('a', label='A'), Input('b', label='B'), AND('g', label='G')],
                        [Connection('1', 'a', 0, 'g', 0), Connection('2', 'b', 0, 'g', 1)])
        table = board.truthTable()
        rows = [[cell.strip() for cell in line.split('|')] for line in table.splitlines() if '|' in line]
        self.assertEqual(rows[0], ['A', 'B', 'G'])
        self.assertEqual(rows[1:], [['0', '0', 'F'], ['0', '1', 'F'], ['1', '0', 'F'], ['1', '1', 'T']])
        # inputs are put back afterwards
        self.assertEqual([board.getobj('a').value, board.getobj('b').value], [False, False])

    def test_truth_table_without_inputs(self):
        self.assertEqual(Circuit([NOT('n')]).truthTable(), '')

    def test_diagnose_prints(self):
        self.circuit.tick()
        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            self.circuit.diagnose()
        self.assertIn("CIRCUIT DIAGNOSIS", out.getvalue())
        self.assertIn("[0]:a, [1]:b", out.getvalue())

    # ==========================================
    # 3. FILES
    # ==========================================

    def test_json_round_trip(self):
        with tempfile.TemporaryDirectory() as folder:
            location = os.path.join(folder, 'board.json')
            self.circuit.writetojson(location)
            board = Circuit()
            board.readfromjson(location)
        self.assertEqual([n.json_data() for n in board.nodes], [n.json_data() for n in self.circuit.nodes])
        self.assertEqual([c.json_data() for c in board.connections],
                         [c.json_data() for c in self.circuit.connections])
        self.assertEqual(board.tick(), self.circuit.tick())

    def test_module_save_and_load(self):
        board = Circuit([Input('i1'), Input('i2'), AND('g'), Output('o')],
                        [Connection('1', 'i1', 0, 'g', 0), Connection('2', 'i2', 0, 'g', 1),
                         Connection('3', 'g', 0, 'o', 0)])
        with tempfile.TemporaryDirectory() as folder:
            location = os.path.join(folder, 'and2.json')
            saved = board.save_as_module(location, 'AND2')
            self.circuit.clearcircuit()
            loaded = self.circuit.getmodule(location)
        self.assertEqual(loaded.json_data(), saved.json_data())

        self.circuit.add(Input('x', True))
        self.circuit.add(instance(loaded, 'm'))
        self.circuit.connect('x', 0, 'm', 0)
        self.circuit.connect('x', 0, 'm', 1)
        self.assertEqual(self.circuit.tick()['m'], [True])

    def test_save_as_module_needs_terminals(self):
        with tempfile.TemporaryDirectory() as folder:
            with self.assertRaises(ModuleError):
                Circuit([NOT('n')]).save_as_module(os.path.join(folder, 'x.json'), 'X')

    def test_modules_survive_json(self):
        board = Circuit()
        board.load({
            "nodes": [{"id": "m", "type": "MODULE", "moduleId": "inv", "inputCount": 1, "outputCount": 1},
                      {"id": "s", "type": "INPUT", "inputValue": False}],
            "connections": [{"id": "w", "fromNodeId": "s", "fromPinIndex": 0, "toNodeId": "m", "toPinIndex": 0}],
            "modules": [{"id": "inv", "name": "INV",
                         "nodes": [{"id": "i", "type": "INPUT"}, {"id": "n", "type": "NOT"}, {"id": "o", "type": "OUTPUT"}],
                         "connections": [{"id": "1", "fromNodeId": "i", "toNodeId": "n"},
                                         {"id": "2", "fromNodeId": "n", "toNodeId": "o"}],
                         "inputNodeIds": ["i"], "outputNodeIds": ["o"]}],
        })
        self.assertEqual(board.modules['inv'].inputcount, 1)
        self.assertEqual(board.tick()['m'], [True])

    def test_decoding_errors(self):
        with self.assertRaises(FormatError):
            decode({"id": "x"})
        with self.assertRaises(FormatError):
            Circuit().load([])

    def test_unknown_kind_decodes_as_plain_node(self):
        node = decode({"id": "x", "type": "XOR"})
        self.assertEqual(node.kind, "XOR")
        self.assertEqual(get(Const.PINBAR).outputcount, 4)

    def test_null_pin_indices_and_counts_read_as_defaults(self):
        """Hand-edited files with null pins or counts load instead of crashing."""
        conn = decode_connection({"id": "c", "fromNodeId": "a", "fromPinIndex": None,
                                  "toNodeId": "b", "toPinIndex": None})
        self.assertEqual((conn.output, conn.index), (0, 0))
        gate = decode({"id": "g", "type": "AND", "inputCount": None, "outputCount": None})
        self.assertEqual((gate.inputcount, gate.outputcount), (2, 1))

    def test_default_pinbar_mode(self):
        bar = decode({"id": "p", "type": "PINBAR", "outputCount": 2, "pinBarValues": [True]})
        self.assertEqual(bar.mode, Const.INPUT_MODE)
        self.assertEqual(bar.process([]), [True, False])


class TestCLI(unittest.TestCase):
    def setUp(self):
        self.folder = tempfile.TemporaryDirectory()
        self.location = os.path.join(self.folder.name, 'board.json')
        with open(self.location, 'w') as file:
            json.dump(SANDBOX, file)

    def tearDown(self):
        self.folder.cleanup()

    def run_cli(self, *argv):
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_evaluate(self):
        code, out, _ = self.run_cli(self.location)
        self.assertEqual(code, 0)
        lines = {line.split()[0]: line.split()[-1] for line in out.splitlines()}
        self.assertEqual(lines['A'], 'T')
        self.assertEqual(lines['Y'], 'F')
        self.assertEqual(lines['N'], 'T')

    def test_evaluate_several_ticks(self):
        _, out, _ = self.run_cli(self.location, 'evaluate', '--ticks', '2')
        lines = {line.split()[0]: line.split()[-1] for line in out.splitlines()}
        self.assertEqual(lines['N'], 'F')

    def test_cycles(self):
        code, out, _ = self.run_cli(self.location, 'cycles')
        self.assertEqual((code, out.split()), (0, ['c4']))

    def test_table(self):
        code, out, _ = self.run_cli(self.location, 'table')
        self.assertEqual(code, 0)
        self.assertIn('A', out)

    def test_null_pin_index_in_file(self):
        sandbox = json.loads(json.dumps(SANDBOX))
        sandbox["connections"][0]["toPinIndex"] = None
        with open(self.location, 'w') as file:
            json.dump(sandbox, file)
        code, out, _ = self.run_cli(self.location)
        self.assertEqual(code, 0)
        self.assertIn('Y', out)

    def test_missing_file(self):
        code, _, err = self.run_cli(os.path.join(self.folder.name, 'missing.json'))
        self.assertEqual(code, 1)
        self.assertIn('error', err)


if __name__ == '__main__':
    unittest.main()
