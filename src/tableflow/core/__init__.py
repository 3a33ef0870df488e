"""Blueprint engine: classification, dimension planning, sparse grid, cells and evaluation.

Import the concrete modules directly, e.g.::

    from tableflow.core.dimensions import analyze
    from tableflow.core.blueprint import Blueprint
"""
