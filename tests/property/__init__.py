"""
Property-Based Tests for residual_guard
=======================================

Property-based tests using Hypothesis over generated block shapes and
buffers: validity of written finite data, detection of sentinel and
non-finite entries, and purity of the verdict.
"""
