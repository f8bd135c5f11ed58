"""Storefront core: carts, stock reservation and order placement."""
