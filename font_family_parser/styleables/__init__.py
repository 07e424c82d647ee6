"""
Styleable definitions sub-package for font-family-parser.

Contains YAML files that declare the attribute schema of each element
the parser reads (name -> format, default, enum values). The loader
module (styleable_registry.py in the parent package) reads these files
at runtime.
"""
