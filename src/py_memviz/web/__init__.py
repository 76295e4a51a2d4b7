"""Browser-based web UI for py-memviz.

This package provides a Flask application that serves the visualizer
page and a JSON API over a ``Session``.  It is an **optional** extra —
install with::

    pip install py-memviz[web]

The ``create_app`` factory in ``app.py`` builds the app; ``main`` runs
the development server.
"""
