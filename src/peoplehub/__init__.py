"""peoplehub core: employee management entities, authorization and absence booking."""

__version__ = "0.1.0"
