"""Monte Carlo Glauber model of nucleus-nucleus collisions: profiles, nuclei, events, smearing and batch runs."""

__version__ = "3.2.0"
__all__ = ["__version__"]