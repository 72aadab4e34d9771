"""logicsim - evaluation engine for gate, pin bar and module circuits."""

from logicsim.Gates import Node, Connection, AND, OR, NOT, Input, Button, Output, LED, PinBar
from logicsim.IC import Module, ModuleDefinition, ModuleError, CyclicModuleError, package
from logicsim.Rank import detect_cycle_connections, would_create_cycle
from logicsim.Circuit import Circuit, evaluate
from logicsim.Store import FormatError, instance

__version__ = "1.0.0"

__all__ = [
    'Node', 'Connection', 'AND', 'OR', 'NOT', 'Input', 'Button', 'Output', 'LED', 'PinBar',
    'Module', 'ModuleDefinition', 'ModuleError', 'CyclicModuleError', 'package',
    'Circuit', 'evaluate', 'detect_cycle_connections', 'would_create_cycle',
    'FormatError', 'instance',
]
