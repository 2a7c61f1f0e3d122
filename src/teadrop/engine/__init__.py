"""
Engine - Transaction submission and distribution for teadrop.

- retry:        Bounded retry for underpriced submissions
- deployment:   One-shot token contract deployment
- distribution: Sequential, rate-limited transfer loop over a recipient list
"""
