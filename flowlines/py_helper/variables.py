"""Paths shared by the runner and helpers, relative to the project root."""

CONFIG = "config.toml"
OUTPUT = "output"
