"""Routing — compiled route table with O(path-depth) matching.

Routes are registered during setup, in the order the route sorter
produces, and compiled into an immutable lookup structure when the
app freezes.
"""
