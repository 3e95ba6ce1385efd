"""
rootid - root build identifier propagation.

A root build gets a canonical identifier (``<JOB_NAME>-<BUILD_NUMBER>``).
Every downstream job it triggers inherits that identifier through its
parameter set, so artifacts deployed anywhere in the pipeline can be traced
back to the build that started it.
"""

__version__ = "0.3.0"
