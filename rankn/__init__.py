"""Algorithmic subtyping for a predicative higher-rank calculus."""

version = '0.1.0'
