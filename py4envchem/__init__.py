"""py4envchem package.

Companion toolkit for the *Python for Environmental Chemists* textbook. It
carries the helpers the chapters teach (importing, reshaping and
transforming tabular data, fitting linear and non-linear regression
models, plotting), the exercise checker used on student submissions, and
the literate-document renderer that turns the chapters into a static
website for publication.

Package Structure
-----------------
- `pipeline/`:
    Self-contained subpackages for data import, modelling, plotting,
    exercises, book building and environment (lockfile) checks.
- `config.py`: All configuration constants (paths, defaults) as UPPER_SNAKE_CASE.
- `exceptions.py`: Project-specific exception classes.
- `cli.py`: Command-line entrypoint (``python -m py4envchem``).

Examples
--------
>>> from py4envchem.pipeline.data_import import load_dataset
>>> ozone = load_dataset("atmospheric_ozone")  # doctest: +SKIP
"""

__version__ = "0.4.0"
