"""hintscope - incremental lexical-scope index for JavaScript completion."""

__version__ = "0.1.0"
