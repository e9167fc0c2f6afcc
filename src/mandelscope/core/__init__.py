"""Computation core: projection, escape time, sampling and rank coloring."""
