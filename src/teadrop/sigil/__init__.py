"""
Sigil - Wallet keys and transaction signing for teadrop.

- eth:     Private key loading and account derivation
- context: SigningContext, the per-session binding of wallet, chain and token
"""
