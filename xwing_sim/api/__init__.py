"""HTTP interface for running simulations.

Usage:
    python -m xwing_sim.api.run

Then POST a roster name and trial count to http://localhost:8000/api/simulate.
"""
