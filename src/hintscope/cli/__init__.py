"""hintscope command-line interface."""
