"""
The MODEL layer contains pure data structures and graph logic.
It has NO knowledge of the GUI (Qt).
It deals with Notes, Link extraction, Graph topology and the Force layout.
"""
