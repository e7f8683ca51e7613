"""DoodleSolve: interpret and solve hand-drawn math/physics problems, plus a grounded chat assistant."""

__version__ = "0.1.0"
