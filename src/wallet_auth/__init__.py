"""Wallet-signature authentication service."""
