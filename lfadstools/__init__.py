"""Lfadstools - Prepare collections of recording datasets for LFADS runs."""
