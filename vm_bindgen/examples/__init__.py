"""Example contracts used by the docs, the CLI examples and the tests."""
