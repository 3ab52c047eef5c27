"""Grid World - SARSA(lambda) navigation on a random grid.

An agent learns to reach a goal cell with online temporal-difference control
and eligibility traces, annealing its exploration rate every episode until it
falls to a termination threshold.
"""

__version__ = "1.0.0"
__author__ = "Grid World Demo"
