"""Command line front end: load a saved sandbox and look at its signals."""
import argparse
import logging
import os
import sys

from readchar import readkey, key

from logicsim.Circuit import Circuit, bits
from logicsim.IC import ModuleError
from logicsim.Store import FormatError

logger = logging.getLogger(__name__)


def clear_screen():
    # clears the clutter
    os.system('cls' if os.name == 'nt' else 'clear')


def show(circuit: Circuit):
    width = max((len(str(node)) for node in circuit.nodes), default=4) + 2
    for node in circuit.nodes:
        print(f'{str(node):<{width}}{node.kind:<9}{bits(circuit.output(node.id))}')


# The loop that lets the user flip inputs and step feedback one tick at a time
def run(circuit: Circuit):
    variables = circuit.varlist()
    ticks = 1
    circuit.tick()
    while True:
        clear_screen()
        print(f"--- Circuit Simulator (tick {ticks}) ---")
        show(circuit)
        print()
        for i, var in enumerate(variables[:9], start=1):
            print(f"{i}. toggle {var} ({'T' if var.value else 'F'})")
        print("SPACE. tick    ESC. quit")

        choice = readkey()
        if choice == key.ESC:
            print("Exiting Circuit Simulator......")
            break
        elif choice == ' ':
            circuit.tick()
            ticks += 1
        elif choice.isdigit() and 0 < int(choice) <= min(len(variables), 9):
            var = variables[int(choice) - 1]
            var.toggle(not var.value)
            circuit.tick()
            ticks += 1


def main(argv=None):
    parser = argparse.ArgumentParser(prog='logicsim', description='Evaluate a saved logic sandbox')
    parser.add_argument('file', help='sandbox JSON with nodes, connections and modules')
    parser.add_argument('command', nargs='?', default='evaluate',
                        choices=['evaluate', 'table', 'cycles', 'diagnose', 'run'],
                        help='what to do with the circuit (default: evaluate)')
    parser.add_argument('--ticks', type=int, default=1, help='passes to run before printing (evaluate)')
    parser.add_argument('-v', '--verbose', action='store_true', help='log engine details')
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(asctime)s - %(levelname)s - %(message)s')

    circuit = Circuit()
    try:
        circuit.readfromjson(args.file)
        if args.command == 'evaluate':
            for _ in range(max(args.ticks, 1)):
                circuit.tick()
            show(circuit)
        elif args.command == 'table':
            print(circuit.truthTable() or 'No inputs to enumerate')
        elif args.command == 'cycles':
            for conn_id in circuit.cycles():
                print(conn_id)
        elif args.command == 'diagnose':
            circuit.tick()
            circuit.diagnose()
        else:
            run(circuit)
    except (ModuleError, FormatError, OSError, ValueError) as e:
        logger.error(f"Execution error: {e}")
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
