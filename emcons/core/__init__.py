# SPDX-License-Identifier: MIT
"""Core build graph types: nodes, actions, environments and errors."""
