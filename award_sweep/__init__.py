"""award-sweep: plan, run and record award-inventory searches over date ranges."""

__version__ = "0.1.0"
