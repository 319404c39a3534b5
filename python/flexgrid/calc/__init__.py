"""flexgrid.calc - Formula parsing and reactive evaluation engine."""

from flexgrid.calc._ast import (
    BinaryOp,
    CellRef,
    Expr,
    FunctionCall,
    NamedRef,
    Number,
    Parenthesized,
)
from flexgrid.calc._calclog import CalcLogger, NullSink
from flexgrid.calc._evaluator import (
    FormulaEngine,
    compile_expr,
    create_formula_signal,
    evaluate,
)
from flexgrid.calc._functions import (
    BLANK,
    FunctionRegistry,
    FunctionSpec,
    is_blank,
    is_error_value,
    is_supported,
)
from flexgrid.calc._graph import CircularReferenceError, DependencyGraph
from flexgrid.calc._parser import (
    FormulaSyntaxError,
    column_letters_to_index,
    extract_cell_references,
    extract_named_references,
    index_to_column_letters,
    parse,
    parse_functions,
    try_parse,
)
from flexgrid.calc._protocol import CellDelta, LogEntry, LogEventType, RecalcResult, TraceSink
from flexgrid.calc._reactive import Memo, Signal, create_memo, create_signal, untracked
from flexgrid.calc._registry import SignalRegistry
from flexgrid.calc._tokenizer import tokenize

__all__ = [
    "BLANK",
    "BinaryOp",
    "CalcLogger",
    "CellDelta",
    "CellRef",
    "CircularReferenceError",
    "DependencyGraph",
    "Expr",
    "FormulaEngine",
    "FormulaSyntaxError",
    "FunctionCall",
    "FunctionRegistry",
    "FunctionSpec",
    "LogEntry",
    "LogEventType",
    "Memo",
    "NamedRef",
    "NullSink",
    "Number",
    "Parenthesized",
    "RecalcResult",
    "Signal",
    "SignalRegistry",
    "TraceSink",
    "column_letters_to_index",
    "compile_expr",
    "create_formula_signal",
    "create_memo",
    "create_signal",
    "evaluate",
    "extract_cell_references",
    "extract_named_references",
    "index_to_column_letters",
    "is_blank",
    "is_error_value",
    "is_supported",
    "parse",
    "parse_functions",
    "tokenize",
    "try_parse",
    "untracked",
]
