"""Run summaries for finished simulations."""
