"""QAT relay server: compiles QIR with QAT over HTTP."""

__version__ = "0.1.0"
