"""Filesystem routes — discovery, classification, composition, dispatch.

A route tree is a directory of artifacts. Ordinary files are pages; the
reserved stems ``_middleware``, ``_layout``, ``_app`` and ``_error``
contribute to every page below them. Setup turns the tree into a frozen
``RouteTable``; the dispatcher walks one ``ComposedChain`` per request.
"""
