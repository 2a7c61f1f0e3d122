"""
Chain - On-chain interaction layer for teadrop.

Provides the JSON-RPC client, artifact/ABI handling, fee computation and
receipt polling for a single EVM-compatible chain.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
