"""
Commands - CLI command implementations for teadrop.

- deploy:     Deploy the ERC-20 token contract
- distribute: Send the token to every address in the recipient file
"""
