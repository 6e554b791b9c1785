"""Life Calc - multi-year personal finance projections."""

__version__ = "0.3.0"
