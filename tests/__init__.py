"""
Test suite for the PyAntialias package.

This test suite covers:
- Import tests for all modules and submodules
- Unit tests for the buffer, pool, resampling, convolution and edge modules
- Integration tests for complete image workflows

Run with: pytest
"""
