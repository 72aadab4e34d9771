# Constants shared by the engine, the loader and the CLI

AND = 'AND'
OR = 'OR'
NOT = 'NOT'
INPUT = 'INPUT'
OUTPUT = 'OUTPUT'
LED = 'LED'
BUTTON = 'BUTTON'
PINBAR = 'PINBAR'
MODULE = 'MODULE'

# PINBAR direction
INPUT_MODE = 'input'
OUTPUT_MODE = 'output'

# default [inputs, outputs] for each kind
GATE_CONFIGS = {
    AND    : (2, 1),
    OR     : (2, 1),
    NOT    : (1, 1),
    INPUT  : (0, 1),
    BUTTON : (0, 1),
    OUTPUT : (1, 0),
    LED    : (1, 0),
    PINBAR : (0, 4),
    MODULE : (0, 0),
}

# JSON keys
ID = 'id'
TYPE = 'type'
LABEL = 'label'
INPUTCOUNT = 'inputCount'
OUTPUTCOUNT = 'outputCount'
INPUTVALUE = 'inputValue'
PINBARMODE = 'pinBarMode'
PINBARVALUES = 'pinBarValues'
MODULEID = 'moduleId'
PINNAMES = 'pinNames'

FROMNODE = 'fromNodeId'
FROMPIN = 'fromPinIndex'
TONODE = 'toNodeId'
TOPIN = 'toPinIndex'

NAME = 'name'
NODES = 'nodes'
CONNECTIONS = 'connections'
MODULES = 'modules'
INPUTNODES = 'inputNodeIds'
OUTPUTNODES = 'outputNodeIds'
INPUTNAMES = 'inputPinNames'
OUTPUTNAMES = 'outputPinNames'
