"""Life Calc CLI."""
