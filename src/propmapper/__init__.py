"""PropMapper - map CSV columns onto a target property schema."""

__version__ = "0.1.0"
