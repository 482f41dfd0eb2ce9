"""Domain modules. Each sub-package is one module: `mod.py` exports `MODULE`, and
every other file (except `business.py`) exports the `CAPABILITY` adapter for the
capability it is named after."""
