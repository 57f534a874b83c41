"""Headless subpackages behind the book, its exercises and its build."""
