"""
The VIEW layer: camera math, pointer interaction and the Qt widgets that
draw the graph. ``camera`` and ``interaction`` do not import Qt.
"""
