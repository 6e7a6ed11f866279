"""
residual_guard Test Suite
=========================

Test Categories:
- Unit Tests: sentinel poisoning, array checks, evaluation verdicts,
  diagnostic rendering, guarded evaluation, configuration
- Property Tests: validity properties over generated buffers
"""
