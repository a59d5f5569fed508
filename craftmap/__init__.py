"""
craftmap: KISSlicer → CraftWare G-code post-processor.

Annotates KISSlicer path-type comments with CraftWare ``;segType:``
tags so the toolpath shows up in colour in the CraftWare viewer, and
normalizes the feedrate of short segments ("bang removal").
"""

__version__ = "1.0.0"
