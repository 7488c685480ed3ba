"""Frontends - User interfaces for cellrun.

A frontend feeds input blocks to a Session and renders the SessionResult
it gets back. It knows nothing about segmentation or evaluation.

Submodules:
    cli/    Command-line interface (run a file, interactive REPL)
"""
